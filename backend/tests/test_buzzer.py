from quizbuzz.models import Participant
from quizbuzz.services.rooms import buzz


def test_buzz_without_room_is_silent(registry, broadcaster):
    assert buzz(registry, 'NOPE', Participant('p1')) is None
    assert broadcaster.events == []
    assert 'NOPE' not in registry


def test_buzz_outside_active_question_is_silent(registry, broadcaster):
    registry.join('ABCD', Participant('p1', 'Alice'))
    broadcaster.events.clear()
    assert buzz(registry, 'ABCD', Participant('p1', 'Alice')) is None
    assert broadcaster.named('buzzed') == []
    assert registry.get('ABCD').buzzer_winner is None


def test_first_buzz_wins_and_later_ones_drop(registry, broadcaster):
    for pid in ('p1', 'p2', 'p3'):
        registry.join('ABCD', Participant(pid, pid.upper()))
    registry.start_question('ABCD')

    assert buzz(registry, 'ABCD', Participant('p2', 'P2')).id == 'p2'
    assert buzz(registry, 'ABCD', Participant('p1', 'P1')) is None
    assert buzz(registry, 'ABCD', Participant('p2', 'P2')) is None
    assert buzz(registry, 'ABCD', Participant('p3', 'P3')) is None

    buzzed = broadcaster.named('buzzed')
    assert len(buzzed) == 1
    assert buzzed[0][2] == {'roomCode': 'ABCD', 'player': registry.get('ABCD').participants['p2'].to_dict()}
    assert registry.get('ABCD').buzzer_winner.id == 'p2'


def test_winner_carries_stored_score(registry, broadcaster):
    registry.join('ABCD', Participant('p1', 'Alice'))
    registry.update_score('ABCD', 'p1', 4)
    registry.start_question('ABCD')
    buzz(registry, 'ABCD', Participant('p1', 'Alice'))
    assert broadcaster.named('buzzed')[0][2]['player']['score'] == 4


def test_buzz_from_non_member_can_win(registry, broadcaster):
    registry.get_or_create('ABCD')
    registry.start_question('ABCD')
    winner = buzz(registry, 'ABCD', Participant('guest', 'Guest'))
    assert winner.id == 'guest'
    assert broadcaster.named('buzzed')[0][2]['player']['name'] == 'Guest'


def test_new_question_reopens_buzzer(registry, broadcaster):
    registry.join('ABCD', Participant('p1'))
    registry.join('ABCD', Participant('p2'))
    registry.start_question('ABCD')
    buzz(registry, 'ABCD', Participant('p2'))
    registry.start_question('ABCD')
    assert buzz(registry, 'ABCD', Participant('p1')).id == 'p1'
    assert [e[2]['player']['id'] for e in broadcaster.named('buzzed')] == ['p2', 'p1']


def test_game_start_closes_buzzer(registry, broadcaster):
    registry.join('ABCD', Participant('p1'))
    registry.start_question('ABCD')
    registry.game_start('ABCD')
    assert buzz(registry, 'ABCD', Participant('p1')) is None
    assert broadcaster.named('buzzed') == []
