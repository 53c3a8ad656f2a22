from scrumpoker.models import CARD_VALUES, Player, Room, card_rank, compare_cards, is_card_value


def test_numeric_cards_sort_ascending():
    numeric = [c for c in CARD_VALUES if c != 'X']
    assert sorted(reversed(numeric), key=card_rank) == ['1', '2', '3', '5', '8', '13', '20']
    assert compare_cards('3', '13') < 0
    assert compare_cards('20', '8') > 0
    assert compare_cards('5', '5') == 0


def test_x_sorts_after_every_number_and_before_no_card():
    for card in CARD_VALUES[:-1]:
        assert compare_cards('X', card) > 0
    assert compare_cards(None, 'X') > 0


def test_is_card_value():
    assert all(is_card_value(c) for c in CARD_VALUES)
    assert not is_card_value('4')
    assert not is_card_value(5)
    assert not is_card_value(None)


def test_room_snapshot_hides_other_cards_until_revealed():
    room = Room(code='R1', created_at=0, last_activity=0)
    room.players['a'] = Player(id='a', name='Alice', joined_at=1.5, card='5')
    room.players['b'] = Player(id='b', name='Bob', joined_at=2, card='8')

    seen_by_alice = {p['id']: p for p in room.to_dict(viewer_id='a')['players']}
    assert seen_by_alice['a']['card'] == '5'
    assert seen_by_alice['b']['card'] is None
    assert seen_by_alice['b']['hasCard'] is True
    assert seen_by_alice['a']['joinedAt'] == 1500

    room.is_revealed = True
    seen_by_alice = {p['id']: p for p in room.to_dict(viewer_id='a')['players']}
    assert seen_by_alice['b']['card'] == '8'
