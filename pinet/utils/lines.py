import os

from pinet.postprocess.assembler import split_xy


def write_lines(lanes, line_save_path):
    save_dir, _ = os.path.split(line_save_path)
    if save_dir and not os.path.exists(save_dir):
        os.makedirs(save_dir)
    with open(line_save_path, 'w') as fp:
        for xs, ys in zip(*split_xy(lanes)):
            for x, y in zip(xs, ys):
                fp.write('%d %d ' % (x, y))
            fp.write('\n')


def coordinate_parse(line):
    if line.strip() == '':
        return [], []

    items = line.split(' ')[:-1]
    x = [int(float(items[2*i])) for i in range(len(items)//2)]
    y = [int(float(items[2*i+1])) for i in range(len(items)//2)]

    return x, y


def read_lines(line_save_path):
    with open(line_save_path, 'r') as fp:
        lines = fp.readlines()
    lanes = []
    for line in lines:
        x, y = coordinate_parse(line)
        lanes.append(list(zip(x, y)))
    return lanes
