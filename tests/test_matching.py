import unittest

from game import (
    Card,
    IllegalFlipError,
    InvalidGridError,
    flip_card,
    hide_unmatched,
    is_deck_complete,
    make_deck,
    make_random,
    resolve_pair,
    reveal_all,
)


def _deck(*symbols):
    return tuple(Card(symbol=s) for s in symbols)


class TestMatchingMachine(unittest.TestCase):
    def test_given_pair_count_when_making_deck_then_each_symbol_twice_face_down(self):
        deck = make_deck(make_random(1), pairs=6)
        self.assertEqual(len(deck), 12)
        symbols = [c.symbol for c in deck]
        for s in set(symbols):
            self.assertEqual(symbols.count(s), 2)
        self.assertTrue(all(not c.face_up and not c.matched for c in deck))
        self.assertEqual(make_deck(make_random(1), pairs=6), deck)

    def test_given_unsupported_pair_count_when_making_deck_then_rejected(self):
        with self.assertRaises(InvalidGridError):
            make_deck(make_random(1), pairs=5)

    def test_given_two_open_cards_when_flipping_third_then_rejected(self):
        deck = _deck('a', 'b', 'a', 'b')
        deck, open_idx = flip_card(deck, (), 0)
        self.assertEqual(open_idx, (0,))
        self.assertTrue(deck[0].face_up)
        deck, open_idx = flip_card(deck, open_idx, 1)
        self.assertEqual(open_idx, (0, 1))
        with self.assertRaises(IllegalFlipError):
            flip_card(deck, open_idx, 2)

    def test_given_open_or_out_of_range_card_when_flipping_then_rejected(self):
        deck, open_idx = flip_card(_deck('a', 'b', 'a', 'b'), (), 0)
        with self.assertRaises(IllegalFlipError):
            flip_card(deck, open_idx, 0)
        with self.assertRaises(IllegalFlipError):
            flip_card(deck, open_idx, 4)

    def test_given_equal_symbols_when_resolving_then_matched_forever(self):
        deck = _deck('a', 'b', 'a', 'b')
        deck, open_idx = flip_card(deck, (), 0)
        deck, open_idx = flip_card(deck, open_idx, 2)
        deck, matched = resolve_pair(deck, open_idx)
        self.assertTrue(matched)
        self.assertTrue(deck[0].matched and deck[2].matched)
        self.assertTrue(deck[0].face_up)
        with self.assertRaises(IllegalFlipError):
            flip_card(deck, (), 0)

    def test_given_different_symbols_when_resolving_then_both_close(self):
        deck = _deck('a', 'b', 'a', 'b')
        deck, open_idx = flip_card(deck, (), 0)
        deck, open_idx = flip_card(deck, open_idx, 1)
        deck, matched = resolve_pair(deck, open_idx)
        self.assertFalse(matched)
        self.assertFalse(deck[0].face_up or deck[1].face_up)
        self.assertFalse(deck[0].matched or deck[1].matched)

    def test_given_one_open_card_when_resolving_then_rejected(self):
        deck, open_idx = flip_card(_deck('a', 'a'), (), 0)
        with self.assertRaises(IllegalFlipError):
            resolve_pair(deck, open_idx)

    def test_given_same_index_twice_when_resolving_then_rejected_and_nothing_matched(self):
        deck = (Card('a', face_up=True), Card('a'))
        with self.assertRaises(IllegalFlipError):
            resolve_pair(deck, (0, 0))
        self.assertFalse(deck[0].matched)

    def test_given_partly_matched_deck_when_revealing_and_hiding_then_only_unmatched_close(self):
        deck = _deck('a', 'b', 'a', 'b')
        deck, open_idx = flip_card(deck, (), 0)
        deck, open_idx = flip_card(deck, open_idx, 2)
        deck, _ = resolve_pair(deck, open_idx)

        shown = reveal_all(deck)
        self.assertTrue(all(c.face_up for c in shown))
        self.assertEqual([c.matched for c in shown], [True, False, True, False])

        hidden = hide_unmatched(shown)
        self.assertEqual([c.face_up for c in hidden], [True, False, True, False])
        self.assertEqual([c.matched for c in hidden], [True, False, True, False])

    def test_given_every_pair_matched_when_checking_then_complete(self):
        deck = _deck('a', 'a', 'b', 'b')
        self.assertFalse(is_deck_complete(deck))
        for first, second in ((0, 1), (2, 3)):
            deck, open_idx = flip_card(deck, (), first)
            deck, open_idx = flip_card(deck, open_idx, second)
            deck, _ = resolve_pair(deck, open_idx)
        self.assertTrue(is_deck_complete(deck))


if __name__ == '__main__':
    unittest.main(verbosity=2)
