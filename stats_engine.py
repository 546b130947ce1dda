"""
命中概率统计

给定单抽的目标UP概率，计算"前 k 抽内至少命中 1~R 次"的累积概率曲线族，
可选叠加井机制。曲线族的下标约定：
    family[r][i] = 前 i+1 抽内至少命中 r+1 次的概率
只使用单抽概率作为参数，十连最后一抽的保底不计入命中分布。
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from config import StatsConfig
from negative_binomial import neg_binom_cdf
from rates import RateTable, Rarity
from spark import SparkPolicy, apply_sparks


def _fit_row(row: np.ndarray, hits: int, max_pulls: int) -> np.ndarray:
    """补齐或截断到 max_pulls，并把抽数不足 hits 的位置置为0"""
    fitted = np.zeros(max_pulls, dtype=float)
    n = min(len(row), max_pulls)
    fitted[:n] = row[:n]
    if n < max_pulls and n > 0:
        # 不足的部分沿用最后一个值（累积概率不会下降）
        fitted[n:] = row[n - 1]
    fitted[:min(hits - 1, max_pulls)] = 0.0
    return fitted


def raw_family(focus_probability: float, max_hits: int, max_pulls: int) -> np.ndarray:
    """不考虑井的曲线族，形状 (max_hits, max_pulls)"""
    rows = []
    for r in range(max_hits):
        hits = r + 1
        cdf = neg_binom_cdf(hits, focus_probability, max_pulls)
        rows.append(_fit_row(cdf, hits, max_pulls))
    return np.vstack(rows) if rows else np.zeros((0, max_pulls))


@dataclass(frozen=True, eq=False)
class DistributionFamily:
    """
    累积概率曲线族

    values[r][i]: 前 i+1 抽内至少命中 r+1 次的概率
    highlight: 当前高亮的曲线下标（对应图表中选中的目标命中数）
    """
    values: np.ndarray
    focus_probability: float
    sparks_applied: bool = False
    hits_per_spark: Optional[int] = None
    highlight: int = field(default=-1)

    def __post_init__(self):
        values = np.array(self.values, dtype=float)
        values.setflags(write=False)
        object.__setattr__(self, 'values', values)
        highlight = self.highlight if self.highlight >= 0 else self.max_hits - 1
        object.__setattr__(self, 'highlight', highlight)

    def __len__(self):
        return self.values.shape[0]

    def __getitem__(self, index):
        return self.values[index]

    @property
    def max_hits(self) -> int:
        return self.values.shape[0]

    @property
    def max_pulls(self) -> int:
        return self.values.shape[1]

    def with_highlight(self, index: int) -> "DistributionFamily":
        if not 0 <= index < self.max_hits:
            raise IndexError(f"高亮曲线下标越界: {index}")
        return DistributionFamily(self.values, self.focus_probability, self.sparks_applied,
                                  self.hits_per_spark, highlight=index)

    def probability(self, hits: int, pulls: int) -> float:
        """前 pulls 抽内至少命中 hits 次的概率（hits、pulls 从1开始）"""
        if not 1 <= hits <= self.max_hits:
            raise IndexError(f"命中数超出范围 1~{self.max_hits}: {hits}")
        if not 1 <= pulls <= self.max_pulls:
            raise IndexError(f"抽数超出范围 1~{self.max_pulls}: {pulls}")
        return float(self.values[hits - 1, pulls - 1])

    def point_of_interest(self, hits: int, pulls: int) -> Tuple[int, float]:
        """图表上选中的点 (抽数, 概率)"""
        return pulls, self.probability(hits, pulls)

    def pulls_needed(self, hits: int, probability: float) -> Optional[int]:
        """累积概率首次达到 probability 所需的抽数，窗口内达不到时返回 None"""
        row = self.values[hits - 1]
        idx = int(np.searchsorted(row, probability, side='left'))
        if idx >= len(row):
            return None
        return idx + 1

    def datasets(self) -> List[List[Tuple[int, float]]]:
        """图表数据：每条曲线为 [(抽数, 概率), ...]"""
        pulls = range(1, self.max_pulls + 1)
        return [list(zip(pulls, row.tolist())) for row in self.values]


def compute_family(focus_probability: float, max_hits_tracked: int, max_pulls: int,
                   apply_spark: bool = False, hits_per_spark: int = 200,
                   spark_policy: SparkPolicy = SparkPolicy.BLOCK_COMPLETE) -> DistributionFamily:
    """
    计算曲线族（每次调用都完整重算，缓存由调用方负责）
    """
    if not 0.0 <= focus_probability <= 1.0:
        raise ValueError(f"目标概率必须在 [0, 1] 内: {focus_probability}")
    if max_hits_tracked < 1:
        raise ValueError(f"至少追踪1个命中数: {max_hits_tracked}")
    if max_pulls < 1:
        raise ValueError(f"抽数窗口必须为正: {max_pulls}")

    values = raw_family(focus_probability, max_hits_tracked, max_pulls)
    if apply_spark:
        values = np.vstack(apply_sparks(values, hits_per_spark, spark_policy))
    return DistributionFamily(values, focus_probability, sparks_applied=apply_spark,
                              hits_per_spark=hits_per_spark if apply_spark else None)


class StatsEngine:
    """按配置计算曲线族"""

    def __init__(self, config: StatsConfig = None):
        self.config = config or StatsConfig()

    def compute_family(self, focus_probability: float, apply_spark: bool = None,
                       max_hits: int = None, max_pulls: int = None) -> DistributionFamily:
        config = self.config
        return compute_family(
            focus_probability,
            config.max_hits if max_hits is None else max_hits,
            config.max_pulls if max_pulls is None else max_pulls,
            apply_spark=config.apply_sparks if apply_spark is None else apply_spark,
            hits_per_spark=config.hits_per_spark,
            spark_policy=config.spark_policy,
        )

    def family_for(self, rate_table: RateTable, rarity: Rarity = None,
                   apply_spark: bool = None) -> DistributionFamily:
        """使用概率表中单抽的目标UP概率"""
        focus = rate_table.focus_probability(rarity or self.config.focus_rarity)
        return self.compute_family(focus, apply_spark=apply_spark)
