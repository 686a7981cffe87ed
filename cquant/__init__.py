"""Color quantization by metric-parameterized k-means clustering."""

from cquant.bucketing import BucketingMapGenerator
from cquant.clustering import ClusteringMapGenerator, ClusteringResult
from cquant.color import Color
from cquant.errors import ImageIOError, InvalidArgumentError, QuantizationError
from cquant.metrics import CircularHueMetric, DistanceMetric, SquaredEuclideanMetric, get_metric
from cquant.quantize import ColorQuantizer, QuantizationResult

__all__ = [
    "BucketingMapGenerator",
    "CircularHueMetric",
    "ClusteringMapGenerator",
    "ClusteringResult",
    "Color",
    "ColorQuantizer",
    "DistanceMetric",
    "ImageIOError",
    "InvalidArgumentError",
    "QuantizationError",
    "QuantizationResult",
    "SquaredEuclideanMetric",
    "get_metric",
]
