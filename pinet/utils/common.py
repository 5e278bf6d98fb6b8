import os, argparse
import datetime
import numpy as np
import torch

from pinet.utils.config import Config
from pinet.utils.dist_utils import dist_print


def str2bool(v):
    if isinstance(v, bool):
        return v
    if v.lower() in ('yes', 'true', 't', 'y', '1'):
        return True
    elif v.lower() in ('no', 'false', 'f', 'n', '0'):
        return False
    else:
        raise argparse.ArgumentTypeError('Boolean value expected.')

def get_args():
    parser = argparse.ArgumentParser()
    parser.add_argument('config', help = 'path to config file')
    parser.add_argument('--local_rank', type=int, default=0)

    parser.add_argument('--onnx_path', default = None, type = str)
    parser.add_argument('--engine_path', default = None, type = str)
    parser.add_argument('--fp16', default = None, type = str2bool)
    parser.add_argument('--int8', default = None, type = str2bool)
    parser.add_argument('--dla_core', default = None, type = int)
    parser.add_argument('--input_width', default = None, type = int)
    parser.add_argument('--input_height', default = None, type = int)
    parser.add_argument('--output_base_index', default = None, type = int, choices = [0, 3])
    parser.add_argument('--thresh_point', default = None, type = float)
    parser.add_argument('--threshold_instance', default = None, type = float)
    parser.add_argument('--resize_ratio', default = None, type = int)
    parser.add_argument('--min_cluster_size', default = None, type = int)
    parser.add_argument('--cluster_candidate_cap', default = None, type = int)
    parser.add_argument('--eliminate_outliers', default = None, type = str2bool)
    parser.add_argument('--outlier_conf_ratio', default = None, type = float)
    parser.add_argument('--bounds', default = None, type = str, choices = ['grid', 'image'])
    parser.add_argument('--work_dir', default = None, type = str)
    parser.add_argument('--note', default = None, type = str)
    parser.add_argument('--verbose', action='store_true', help='print TensorRT messages and the confidence mask')

    return parser

MERGE_ITEMS = ['onnx_path', 'engine_path', 'fp16', 'int8', 'dla_core', 'input_width', 'input_height',
    'output_base_index', 'thresh_point', 'threshold_instance', 'resize_ratio', 'min_cluster_size',
    'cluster_candidate_cap', 'eliminate_outliers', 'outlier_conf_ratio', 'bounds', 'work_dir', 'note']

def merge_config(parser=None, argv=None):
    if parser is None:
        parser = get_args()
    args = parser.parse_args(argv)
    cfg = Config.fromfile(args.config)

    for item in MERGE_ITEMS:
        if getattr(args, item, None) is not None:
            dist_print('merge ', item, ' config')
            setattr(cfg, item, getattr(args, item))

    return args, cfg


def converter(data):
    if isinstance(data, torch.Tensor):
        data = data.detach().cpu().numpy()
    return np.asarray(data)


def get_work_dir(cfg):
    now = datetime.datetime.now().strftime('%Y%m%d_%H%M%S')
    hyper_param_str = '_tp_%.2f_ti_%.2f' % (cfg.thresh_point, cfg.threshold_instance)
    work_dir = os.path.join(cfg.work_dir, now + hyper_param_str + cfg.note)
    return work_dir
