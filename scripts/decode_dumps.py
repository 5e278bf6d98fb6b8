import os
import glob
import numpy as np

from pinet import DecodeParams, decode
from pinet.utils.common import get_args, merge_config, get_work_dir
from pinet.utils.dist_utils import dist_print, dist_tqdm, get_rank, get_world_size, init_distributed, shard, synchronize
from pinet.utils.lines import write_lines


def get_dump_args():
    parser = get_args()
    parser.add_argument('--dump_dir', required=True, help='directory holding .npz dumps of the raw outputs')
    parser.add_argument('--output_path', default=None, type=str, help='where lines.txt files go, default a timestamped dir under work_dir')
    return parser


def decode_dump(dump_path, params):
    with np.load(dump_path) as dump:
        return decode(dump['confidence'], dump['offset'], dump['embedding'], params)


def run(dump_dir, output_path, params):
    all_dumps = sorted(glob.glob(os.path.join(dump_dir, '**', '*.npz'), recursive=True))
    if len(all_dumps) == 0:
        raise FileNotFoundError('no .npz dumps under "{}"'.format(dump_dir))
    my_dumps = shard(all_dumps, get_rank(), get_world_size())
    dist_print('decoding %d dumps on %d processes' % (len(all_dumps), get_world_size()))

    num_lanes = 0
    for dump_path in dist_tqdm(my_dumps):
        lanes = decode_dump(dump_path, params)
        num_lanes += len(lanes)
        name = os.path.relpath(dump_path, dump_dir)
        write_lines(lanes, os.path.join(output_path, name[:-3] + 'lines.txt'))
    return num_lanes


if __name__ == "__main__":
    args, cfg = merge_config(get_dump_args())
    init_distributed(args.local_rank)
    if args.output_path is not None:
        output_path = args.output_path
    else:
        # ranks must agree on one directory, so only a single process gets a timestamped one
        output_path = get_work_dir(cfg) if get_world_size() == 1 else cfg.work_dir
    num_lanes = run(args.dump_dir, output_path, DecodeParams.from_config(cfg))
    synchronize()
    print('rank %d wrote %d lanes to %s' % (get_rank(), num_lanes, output_path))
