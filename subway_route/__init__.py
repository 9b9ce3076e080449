"""지하철 다중 기준 경로 탐색 엔진"""

__version__ = "1.0.0"
