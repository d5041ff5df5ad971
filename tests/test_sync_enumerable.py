import unittest
from unittest.mock import MagicMock, PropertyMock

from pymongo.errors import InvalidOperation, NetworkTimeout

from cursor_stream.extract.async_enumerable import StreamState, to_iterable, to_list_sync
from cursor_stream.extract.cancellation import CancellationToken


def setup_cursor(batches, fail_on_advance=None, error=None):
    cursor = MagicMock()
    position = {"batch": 0}

    def advance(cancellation_token):
        position["batch"] += 1
        if fail_on_advance is not None and position["batch"] == fail_on_advance:
            raise error
        return position["batch"] <= len(batches)

    def current_batch():
        if not 1 <= position["batch"] <= len(batches):
            raise InvalidOperation("no current batch")
        return batches[position["batch"] - 1]

    cursor.advance = MagicMock(side_effect=advance)
    type(cursor).current_batch = PropertyMock(side_effect=current_batch)
    return cursor


class TestCursorDocumentIterator(unittest.TestCase):

    def test_zero_batches_give_empty_output(self):
        cursor = setup_cursor([])

        self.assertEqual(to_list_sync(to_iterable(cursor)), [])
        cursor.advance.assert_called_once_with(CancellationToken.NONE)

    def test_literal_single_document_batches(self):
        a, b, c = {"First": 1}, {"Second": 2}, {"Third": 3}
        cursor = setup_cursor([[a], [b], [c]])

        self.assertEqual(list(to_iterable(cursor)), [a, b, c])

    def test_literal_two_document_batches(self):
        docs = [{"n": i} for i in range(6)]
        cursor = setup_cursor([docs[0:2], docs[2:4], docs[4:6]])

        enumerated = list(to_iterable(cursor))

        self.assertEqual(len(enumerated), 6)
        for position, expected in enumerate(docs):
            self.assertIs(enumerated[position], expected)

    def test_empty_batches_between_documents(self):
        cursor = setup_cursor([[], ["a"], [], [], ["b", "c"], []])

        self.assertEqual(list(to_iterable(cursor)), ["a", "b", "c"])

    def test_exhausted_iterator_is_not_restartable(self):
        cursor = setup_cursor([["a"]])
        iterator = to_iterable(cursor)
        list(iterator)

        self.assertEqual(list(iterator), [])
        self.assertEqual(cursor.advance.call_count, 2)
        self.assertEqual(iterator.state, StreamState.EXHAUSTED)

    def test_failure_after_two_batches(self):
        error = NetworkTimeout("timed out")
        cursor = setup_cursor([["a"], ["b"], ["c"]], fail_on_advance=3, error=error)
        iterator = to_iterable(cursor)

        self.assertEqual(next(iterator), "a")
        self.assertEqual(next(iterator), "b")
        with self.assertRaises(NetworkTimeout) as ctx:
            next(iterator)

        self.assertIs(ctx.exception, error)
        self.assertEqual(iterator.state, StreamState.FAILED)
        self.assertEqual(list(iterator), [])
        self.assertEqual(cursor.advance.call_count, 3)

    def test_token_is_forwarded(self):
        token = CancellationToken()
        cursor = setup_cursor([["a"], ["b"]])

        list(to_iterable(cursor, token))

        for call in cursor.advance.call_args_list:
            self.assertIs(call.args[0], token)


if __name__ == '__main__':
    unittest.main()
