"""
统计配置类
"""
from dataclasses import dataclass

from rates import PullType, Rarity
from spark import SparkPolicy


@dataclass
class StatsConfig:
    """统计配置"""
    # 曲线数量：追踪 1~5 个目标命中（突破次数）
    max_hits: int = 5

    # 井（spark）机制：每200抽兑换一次
    hits_per_spark: int = 200
    apply_sparks: bool = False
    spark_policy: SparkPolicy = SparkPolicy.BLOCK_COMPLETE

    # 卡池
    batch_size: PullType = PullType.TEN  # 十连
    focus_rarity: Rarity = Rarity.SSR_FOCUS  # 目标稀有度（计为命中）

    # 校验
    rate_tolerance: float = 1e-9  # 每个抽位概率和与1的允许误差

    # 蒙特卡洛
    mc_iterations: int = 5000
    seed: int = None

    @property
    def max_pulls(self) -> int:
        """图表横轴长度：5次井一定足够"""
        return self.hits_per_spark * self.max_hits
