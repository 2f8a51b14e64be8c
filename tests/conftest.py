import pytest

from linkq.queue import Queue


@pytest.fixture
def make_queue():
    def make(*values):
        q = Queue()
        for v in values:
            assert q.insert_tail(v)
        return q
    return make
