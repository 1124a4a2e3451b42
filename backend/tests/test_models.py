import pytest

from typerace.errors import DuplicateStart, RaceNotActive, UnknownPlayer
from typerace.models import Room, RoomState, generate_room_code


def _room(*names):
    room = Room('ABC123')
    for idx, name in enumerate(names, start=1):
        room.add_player(f'p{idx}', name)
    return room


def test_generate_room_code_shape():
    code = generate_room_code(6)
    assert len(code) == 6
    assert code == code.upper()
    assert code.isalnum()


def test_host_is_first_joiner_and_follows_departures():
    room = _room('Alice', 'Bob', 'Cara')
    assert room.host.id == 'p1'
    room.remove_player('p1')
    assert room.host.id == 'p2'
    payload = room.players_payload()
    assert payload['p2']['isHost'] is True
    assert payload['p3']['isHost'] is False


def test_remove_unknown_player_raises():
    room = _room('Alice')
    with pytest.raises(UnknownPlayer):
        room.remove_player('nobody')


def test_start_race_only_once():
    room = _room('Alice')
    room.start_race('hello world')
    assert room.state == RoomState.ACTIVE
    assert room.text == 'hello world'
    with pytest.raises(DuplicateStart):
        room.start_race('another text')
    assert room.text == 'hello world'


def test_start_race_rejects_empty_text():
    room = _room('Alice')
    with pytest.raises(ValueError):
        room.start_race('')
    assert room.state == RoomState.WAITING


def test_progress_requires_active_race():
    room = _room('Alice')
    with pytest.raises(RaceNotActive):
        room.record_progress('p1', 3, 40)


def test_progress_unknown_player():
    room = _room('Alice')
    room.start_race('hello')
    with pytest.raises(UnknownPlayer):
        room.record_progress('ghost', 1, 10)


def test_progress_never_goes_backwards():
    room = _room('Alice')
    room.start_race('hello world')
    seen = []
    for reported in [2, 5, 3, 7, 0, 8]:
        seen.append(room.record_progress('p1', reported, 30).progress)
    assert seen == [2, 5, 5, 7, 7, 8]
    assert seen == sorted(seen)


def test_progress_clamped_and_finishes_at_text_end():
    room = _room('Alice')
    room.start_race('hello')
    player = room.record_progress('p1', 99, 61)
    assert player.progress == 5
    assert player.finished is True
    # frozen once finished
    room.record_progress('p1', 2, 10)
    assert player.wpm == 61


def test_mark_finished_freezes_final_stats():
    room = _room('Alice')
    room.start_race('hello')
    room.mark_finished('p1', 50, 97.5)
    room.mark_finished('p1', 80, 100)
    player = room.players['p1']
    assert player.finished is True
    assert player.progress == 5
    assert (player.wpm, player.accuracy) == (50, 97.5)


def test_mark_finished_after_progress_finish_records_accuracy():
    room = _room('Alice')
    room.start_race('hello')
    room.record_progress('p1', 5, 44)
    room.mark_finished('p1', 45, 92)
    assert room.players['p1'].accuracy == 92


def test_mark_finished_while_waiting_rejected():
    room = _room('Alice')
    with pytest.raises(RaceNotActive):
        room.mark_finished('p1', 50, 90)


def test_complete_happens_once():
    room = _room('Alice')
    room.start_race('hello')
    assert room.complete([{'playerId': 'p1'}]) is True
    assert room.state == RoomState.FINISHED
    assert room.complete([{'playerId': 'other'}]) is False
    assert room.ranking == [{'playerId': 'p1'}]


def test_to_dict_hides_text_until_started():
    room = _room('Alice')
    assert room.to_dict()['text'] is None
    room.start_race('hello')
    data = room.to_dict()
    assert data['text'] == 'hello'
    assert data['state'] == 'active'
    assert data['host'] == 'p1'
    assert [p['name'] for p in data['players']] == ['Alice']
