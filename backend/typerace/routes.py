from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the typerace server!'})

@main.route('/health')
def health():
    gateway = current_app.extensions['typerace']
    return jsonify({'status': 'ok', 'rooms': len(gateway.list_rooms())})
