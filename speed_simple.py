import time
import numpy as np
from pinet import DecodeParams, decode
from pinet.utils.common import merge_config

args, cfg = merge_config()
params = DecodeParams.from_config(cfg)

height = cfg.input_height // cfg.resize_ratio
width = cfg.input_width // cfg.resize_ratio
rng = np.random.RandomState(0)
confidence = rng.rand(1, height, width).astype(np.float32)
offset = rng.rand(2, height, width).astype(np.float32)
embedding = rng.randn(4, height, width).astype(np.float32)

for i in range(10):
    lanes = decode(confidence, offset, embedding, params)

t_all = []
for i in range(100):
    t1 = time.time()
    lanes = decode(confidence, offset, embedding, params)
    t2 = time.time()
    t_all.append(t2 - t1)

print('lanes per frame:', len(lanes))
print('average time:', np.mean(t_all) / 1)
print('average fps:',1 / np.mean(t_all))

print('fastest time:', min(t_all) / 1)
print('fastest fps:',1 / min(t_all))

print('slowest time:', max(t_all) / 1)
print('slowest fps:',1 / max(t_all))
