import os
import cv2
import numpy as np
import tensorrt as trt
import pycuda.driver as cuda
import pycuda.autoinit

from pinet import DecodeParams, decode
from pinet.postprocess import positive_mask, format_mask, format_confidence
from pinet.utils.common import get_args, merge_config
from pinet.utils.dist_utils import dist_print

LANE_COLORS = [(0, 255, 0), (0, 0, 255), (255, 0, 0), (0, 255, 255), (255, 0, 255), (255, 255, 0)]


class PINetTRT:
    def __init__(self, engine_path, cfg, verbose=False):
        self.logger = trt.Logger(trt.Logger.VERBOSE if verbose else trt.Logger.ERROR)
        with open(engine_path, "rb") as f, trt.Runtime(self.logger) as runtime:
            self.engine = runtime.deserialize_cuda_engine(f.read())
        self.context = self.engine.create_execution_context()

        self.inputs = []
        self.outputs = []
        self.allocations = []
        for i in range(self.engine.num_io_tensors):
            name = self.engine.get_tensor_name(i)
            is_input = self.engine.get_tensor_mode(name) == trt.TensorIOMode.INPUT
            dtype = self.engine.get_tensor_dtype(name)
            shape = self.engine.get_tensor_shape(name)
            size = np.dtype(trt.nptype(dtype)).itemsize
            for s in shape:
                size *= s
            allocation = cuda.mem_alloc(size)
            binding = {
                'index': i,
                'name': name,
                'dtype': np.dtype(trt.nptype(dtype)),
                'shape': list(shape),
                'allocation': allocation,
            }
            self.allocations.append(allocation)
            if is_input:
                self.inputs.append(binding)
            else:
                self.outputs.append(binding)
        assert len(self.inputs) == 1
        assert len(self.outputs) == len(cfg.output_names)

        self.input_width = cfg.input_width
        self.input_height = cfg.input_height
        self.output_names = list(cfg.output_names)
        self.output_base_index = cfg.output_base_index
        self.params = DecodeParams.from_config(cfg)
        self.verbose = verbose

    def preprocess(self, img):
        img = cv2.resize(img, (self.input_width, self.input_height))
        img = img.astype(np.float32) / 255.0
        # HWC -> NCHW
        img = np.transpose(img, (2, 0, 1))[np.newaxis]
        return np.ascontiguousarray(img)

    def infer(self, img):
        cuda.memcpy_htod(self.inputs[0]['allocation'], self.preprocess(img))
        self.context.execute_v2(self.allocations)
        preds = {}
        for out in self.outputs:
            output = np.zeros(out['shape'], out['dtype'])
            cuda.memcpy_dtoh(output, out['allocation'])
            # explicit batch engines keep a leading batch axis of 1
            if output.ndim == 4:
                output = output[0]
            preds[out['name']] = output
        return preds

    def select(self, preds):
        base = self.output_base_index
        confidence, offset, embedding = [preds[name] for name in self.output_names[base:base + 3]]
        assert confidence.shape[0] == 1
        assert offset.shape[0] == 2
        assert embedding.shape[0] >= 2
        return confidence, offset, embedding

    def forward(self, img):
        preds = self.infer(img)
        confidence, offset, embedding = self.select(preds)
        if self.verbose:
            mask = positive_mask(confidence, confidence.shape[1], confidence.shape[2], self.params.thresh_point)
            dist_print('Output confidence mask:')
            dist_print(format_mask(mask))
            dist_print('Output confidence:')
            dist_print(format_confidence(confidence))
        return decode(confidence, offset, embedding, self.params), preds


def scale_lanes(lanes, src_size, dst_size):
    sx = dst_size[0] / src_size[0]
    sy = dst_size[1] / src_size[1]
    return [[(int(x * sx), int(y * sy)) for x, y in lane] for lane in lanes]


def draw_points(img, lanes):
    for idx, lane in enumerate(lanes):
        color = LANE_COLORS[idx % len(LANE_COLORS)]
        for coord in lane:
            cv2.circle(img, coord, 3, color, -1)
    return img


def save_dump(dump_path, confidence, offset, embedding):
    np.savez(dump_path, confidence=confidence, offset=offset, embedding=embedding)


def get_infer_args():
    parser = get_args()
    parser.add_argument('--image_path', default = None, type = str, help = 'image to run on')
    parser.add_argument('--video_path', default = None, type = str, help = 'video to run on')
    parser.add_argument('--save_path', default = None, type = str, help = 'where to write the rendered image')
    parser.add_argument('--dump_dir', default = None, type = str, help = 'directory for raw output .npz dumps')
    parser.add_argument('--show', action = 'store_true')
    return parser


def run_image(net, args):
    img = cv2.imread(args.image_path)
    if img is None:
        raise FileNotFoundError('cannot read image "{}"'.format(args.image_path))
    lanes, preds = net.forward(img)
    dist_print('detected %d lanes' % len(lanes))
    if args.dump_dir is not None:
        os.makedirs(args.dump_dir, exist_ok=True)
        name = os.path.splitext(os.path.basename(args.image_path))[0]
        save_dump(os.path.join(args.dump_dir, name + '.npz'), *net.select(preds))
    lanes = scale_lanes(lanes, (net.input_width, net.input_height), (img.shape[1], img.shape[0]))
    img = draw_points(img, lanes)
    if args.save_path is not None:
        cv2.imwrite(args.save_path, img)
    if args.show:
        cv2.imshow("result", img)
        cv2.waitKey(0)


def run_video(net, args):
    cap = cv2.VideoCapture(args.video_path)
    frame_idx = 0
    while True:
        success, img = cap.read()
        if not success:
            break
        lanes, preds = net.forward(img)
        if args.dump_dir is not None:
            os.makedirs(args.dump_dir, exist_ok=True)
            save_dump(os.path.join(args.dump_dir, '%06d.npz' % frame_idx), *net.select(preds))
        lanes = scale_lanes(lanes, (net.input_width, net.input_height), (img.shape[1], img.shape[0]))
        cv2.imshow("result", draw_points(img, lanes))
        frame_idx += 1
        if cv2.waitKey(25) & 0xFF == ord('q'):
            break
    cap.release()


if __name__ == "__main__":
    args, cfg = merge_config(get_infer_args())
    net = PINetTRT(cfg.engine_path, cfg, args.verbose)
    if args.image_path is not None:
        run_image(net, args)
    elif args.video_path is not None:
        run_video(net, args)
    else:
        raise NotImplementedError('pass --image_path or --video_path')
