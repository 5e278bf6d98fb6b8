# ENGINE
onnx_path = 'weights/pinet1.0.0.onnx'
engine_path = 'weights/pinet1.0.0.engine'
fp16 = False
int8 = False
dla_core = -1
workspace_size = 1 << 30

# NETWORK
input_width = 512
input_height = 256
input_name = '0'
# confidence, offset, embedding of the two hourglass stacks
output_names = ['1431', '1438', '1445', '1679', '1686', '1693']
output_base_index = 3

# DECODE
thresh_point = 0.81
threshold_instance = 0.22
resize_ratio = 8
min_cluster_size = 3
cluster_candidate_cap = 12
eliminate_outliers = True
outlier_conf_ratio = 0.5
bounds = 'grid'

# EXP
work_dir = 'work_dirs'
note = ''
