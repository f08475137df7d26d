"""
Unit tests for merging, aggregation and top-N selection
"""

import itertools
import unittest

from wordflux.aggregator import Aggregator, merge_maps, top_words
from wordflux.errors import ErrorKind, NotFoundError, ScanIOError
from wordflux.models import FileCountResult


def make_result(path, frequency_map, lines=1):
    return FileCountResult(
        path=path,
        total_words=sum(frequency_map.values()),
        unique_words=len(frequency_map),
        lines_processed=lines,
        frequency_map=frequency_map,
        duration_seconds=0.01,
    )


class TestMergeMaps(unittest.TestCase):
    """Merge must not depend on grouping or order"""

    def setUp(self):
        self.a = {'the': 3, 'fox': 1, 'dog': 2}
        self.b = {'the': 1, 'cat': 4}
        self.c = {'dog': 5, 'cat': 1, 'émile': 2}

    def test_sums_counts_and_treats_absent_as_zero(self):
        self.assertEqual(merge_maps(self.a, self.b),
                         {'the': 4, 'fox': 1, 'dog': 2, 'cat': 4})

    def test_associative(self):
        left = merge_maps(merge_maps(self.a, self.b), self.c)
        right = merge_maps(self.a, merge_maps(self.b, self.c))
        self.assertEqual(left, right)

    def test_commutative_in_every_order(self):
        expected = merge_maps(self.a, self.b, self.c)
        for order in itertools.permutations([self.a, self.b, self.c]):
            self.assertEqual(merge_maps(*order), expected)

    def test_empty_map_is_identity(self):
        self.assertEqual(merge_maps(self.a, {}), self.a)
        self.assertEqual(merge_maps({}, self.a), self.a)
        self.assertEqual(merge_maps(), {})

    def test_inputs_are_not_mutated(self):
        before = dict(self.a)
        merge_maps(self.a, self.b)
        self.assertEqual(self.a, before)


class TestTopWords(unittest.TestCase):

    def setUp(self):
        self.freq = {'the': 5, 'fox': 2, 'dog': 2, 'cat': 2, 'end': 1}

    def test_sorted_by_count_with_alphabetical_ties(self):
        self.assertEqual(top_words(self.freq, 4),
                         [('the', 5), ('cat', 2), ('dog', 2), ('fox', 2)])

    def test_zero_returns_empty(self):
        self.assertEqual(top_words(self.freq, 0), [])

    def test_n_larger_than_vocabulary_returns_all(self):
        result = top_words(self.freq, 50)
        self.assertEqual(len(result), 5)
        self.assertEqual(result[-1], ('end', 1))
        counts = [count for _, count in result]
        self.assertEqual(counts, sorted(counts, reverse=True))

    def test_default_is_ten(self):
        freq = {f"w{i:02d}": i for i in range(20)}
        self.assertEqual(len(top_words(freq)), 10)
        self.assertEqual(top_words(freq)[0], ('w19', 19))

    def test_independent_of_insertion_order(self):
        reordered = dict(reversed(list(self.freq.items())))
        self.assertEqual(top_words(reordered, 3), top_words(self.freq, 3))

    def test_negative_n_rejected(self):
        with self.assertRaises(ValueError):
            top_words(self.freq, -1)


class TestAggregator(unittest.TestCase):

    def test_totals_only_from_successes(self):
        aggregator = Aggregator()
        aggregator.add_success(make_result('/a.txt', {'hello': 2, 'world': 1}, lines=2))
        aggregator.add_failure('/missing.txt', NotFoundError('/missing.txt'))
        aggregator.add_success(make_result('/b.txt', {'hello': 1, 'there': 1}, lines=1))

        result = aggregator.result()

        self.assertEqual(len(result.successful), 2)
        self.assertEqual(len(result.failed), 1)
        self.assertEqual(result.failed[0].kind, ErrorKind.NOT_FOUND)
        self.assertEqual(result.failed[0].path, '/missing.txt')
        self.assertEqual(result.combined_frequency_map, {'hello': 3, 'world': 1, 'there': 1})
        self.assertEqual(result.total_words, 5)
        self.assertEqual(result.total_lines_processed, 3)

    def test_unique_words_is_size_of_combined_map(self):
        aggregator = Aggregator()
        aggregator.add_success(make_result('/a.txt', {'x': 1, 'y': 1}))
        aggregator.add_success(make_result('/b.txt', {'y': 1, 'z': 1}))

        result = aggregator.result()

        # 2 + 2 per file, but y is shared
        self.assertEqual(result.total_unique_words, 3)

    def test_file_maps_are_not_mutated(self):
        first = make_result('/a.txt', {'x': 1})
        aggregator = Aggregator()
        aggregator.add_success(first)
        aggregator.add_success(make_result('/b.txt', {'x': 4}))
        self.assertEqual(first.frequency_map, {'x': 1})

    def test_empty_aggregate(self):
        result = Aggregator().result()
        self.assertEqual(result.successful, [])
        self.assertEqual(result.failed, [])
        self.assertEqual(result.combined_frequency_map, {})
        self.assertEqual(result.total_words, 0)
        self.assertEqual(result.total_unique_words, 0)
        self.assertEqual(result.total_lines_processed, 0)

    def test_to_dict_is_json_ready(self):
        aggregator = Aggregator()
        aggregator.add_success(make_result('/a.txt', {'x': 2}))
        aggregator.add_failure('/bad.txt', ScanIOError('/bad.txt', OSError('boom')))

        data = aggregator.result(duration_seconds=1.23456, effective_workers=2).to_dict()

        self.assertEqual(data['total_words'], 2)
        self.assertEqual(data['duration_seconds'], 1.235)
        self.assertEqual(data['effective_workers'], 2)
        self.assertEqual(data['failed'][0]['error']['kind'], 'io_error')
        self.assertNotIn('combined_frequency_map', data)


if __name__ == '__main__':
    unittest.main()
