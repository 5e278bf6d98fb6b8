from pinet.params import DecodeParams
from pinet.postprocess import decode

__version__ = '1.0.0'
