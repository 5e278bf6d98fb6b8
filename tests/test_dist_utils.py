from pinet.utils.dist_utils import shard, get_rank, get_world_size, dist_print, dist_tqdm


def test_shards_cover_every_item_once():
    items = list(range(10))

    parts = [shard(items, rank, 3) for rank in range(3)]

    assert parts == [[0, 1, 2], [3, 4, 5], [6, 7, 8, 9]]


def test_single_process_defaults(capsys):
    assert get_rank() == 0
    assert get_world_size() == 1
    assert shard([1, 2, 3]) == [1, 2, 3]

    dist_print('hello')

    assert capsys.readouterr().out == 'hello\n'
    assert list(dist_tqdm([1, 2], disable=True)) == [1, 2]
