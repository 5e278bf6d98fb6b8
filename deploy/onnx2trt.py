import os
import tensorrt as trt

from pinet.utils.common import get_args, merge_config
from pinet.utils.dist_utils import dist_print

NUM_OUTPUTS = 6


def build_engine(cfg, verbose=False):
    logger = trt.Logger(trt.Logger.VERBOSE if verbose else trt.Logger.ERROR)
    if not os.path.exists(cfg.onnx_path):
        raise FileNotFoundError('onnx file "{}" does not exist'.format(cfg.onnx_path))

    builder = trt.Builder(logger)
    network = builder.create_network(1 << int(trt.NetworkDefinitionCreationFlag.EXPLICIT_BATCH))
    parser = trt.OnnxParser(network, logger)
    with open(cfg.onnx_path, 'rb') as f:
        if not parser.parse(f.read()):
            for i in range(parser.num_errors):
                dist_print(parser.get_error(i))
            raise RuntimeError('failed to parse {}'.format(cfg.onnx_path))

    config = builder.create_builder_config()
    config.set_memory_pool_limit(trt.MemoryPoolType.WORKSPACE, cfg.workspace_size)
    if cfg.fp16:
        config.set_flag(trt.BuilderFlag.FP16)
    if cfg.int8:
        # no calibrator: every tensor gets the fixed [-127, 127] dynamic range
        config.set_flag(trt.BuilderFlag.INT8)
        for i in range(network.num_layers):
            layer = network.get_layer(i)
            for j in range(layer.num_outputs):
                layer.get_output(j).set_dynamic_range(-127.0, 127.0)
        for i in range(network.num_inputs):
            network.get_input(i).set_dynamic_range(-127.0, 127.0)
    if cfg.dla_core >= 0:
        config.default_device_type = trt.DeviceType.DLA
        config.DLA_core = cfg.dla_core
        config.set_flag(trt.BuilderFlag.GPU_FALLBACK)

    assert network.num_inputs == 1
    input_dims = network.get_input(0).shape
    dist_print('InputDims', list(input_dims))

    assert network.num_outputs == NUM_OUTPUTS
    for i in range(network.num_outputs):
        dims = network.get_output(i).shape
        assert len(dims) in (3, 4)
        dist_print('OutputDims', i, list(dims))

    serialized = builder.build_serialized_network(network, config)
    if serialized is None:
        raise RuntimeError('engine build failed')
    return serialized


def convert(cfg, verbose=False):
    dist_print('start convert...')
    serialized = build_engine(cfg, verbose)
    save_dir = os.path.dirname(cfg.engine_path)
    if save_dir and not os.path.exists(save_dir):
        os.makedirs(save_dir)
    with open(cfg.engine_path, 'wb') as f:
        f.write(serialized)
    dist_print('Build TensorRT engine successful. Engine is saved at', cfg.engine_path)


if __name__ == "__main__":
    args, cfg = merge_config(get_args())
    convert(cfg, args.verbose)
