import os
import torch
import torch.distributed as dist
import tqdm


def get_world_size():
    if not dist.is_available():
        return 1
    if not dist.is_initialized():
        return 1
    return dist.get_world_size()

def get_rank():
    if not dist.is_available():
        return 0
    if not dist.is_initialized():
        return 0
    return dist.get_rank()

def is_main_process():
    return get_rank() == 0

def can_log():
    return is_main_process()

def synchronize():
    """
    Helper function to synchronize (barrier) among all processes when
    using distributed training
    """
    if get_world_size() == 1:
        return
    dist.barrier()

def dist_print(*args, **kwargs):
    if can_log():
        print(*args, **kwargs)

def dist_tqdm(obj, *args, **kwargs):
    if can_log():
        return tqdm.tqdm(obj, *args, **kwargs)
    else:
        return obj

def init_distributed(local_rank):
    if 'WORLD_SIZE' in os.environ and int(os.environ['WORLD_SIZE']) > 1:
        if torch.cuda.is_available():
            torch.cuda.set_device(local_rank)
            backend = 'nccl'
        else:
            backend = 'gloo'
        dist.init_process_group(backend=backend, init_method='env://')
        return True
    return False

def shard(items, rank=None, world_size=None):
    """Contiguous slice of ``items`` owned by ``rank``."""
    if rank is None:
        rank = get_rank()
    if world_size is None:
        world_size = get_world_size()
    total_len = len(items)
    return items[total_len * rank // world_size: total_len * (rank + 1) // world_size]
