"""
蒙特卡洛分析器

用随机模拟得到的经验频率检验解析结果。
"""
import random
from collections import Counter
from typing import Dict

import numpy as np

from config import StatsConfig
from rates import PullType, RateTable, Rarity
from simulator_core import draw_batch
from spark import SparkPolicy, sparks_banked

CHUNK_SIZE = 1000  # 每批模拟的次数，同时也是进度输出间隔


class MonteCarloAnalyzer:
    """蒙特卡洛分析器"""

    def __init__(self, config: StatsConfig, iterations: int = None):
        self.config = config
        self.iterations = config.mc_iterations if iterations is None else iterations
        if self.iterations < 1:
            raise ValueError(f"模拟次数至少为1，当前为 {self.iterations}")

    def estimate_rarity_frequencies(self, rate_table: RateTable,
                                    pull_type: PullType = PullType.ONE) -> Dict[Rarity, float]:
        """
        模拟 iterations 次抽取，统计各稀有度的出现频率
        返回: {稀有度: 频率}（按所有抽位合计）
        """
        rng = random.Random(self.config.seed)
        tally = Counter()
        total = 0
        for _ in range(self.iterations):
            result = draw_batch(rate_table, pull_type, rng)
            tally.update(result.rarities)
            total += len(result)
        return {rarity: tally[rarity] / total for rarity in Rarity}

    @staticmethod
    def expected_frequencies(rate_table: RateTable,
                             pull_type: PullType = PullType.ONE) -> Dict[Rarity, float]:
        """各抽位分布的平均值，即频率的理论值"""
        positions = rate_table.positions(pull_type)
        return {rarity: sum(d[rarity] for d in positions) / len(positions) for rarity in Rarity}

    def simulate_hit_family(self, focus_probability: float, max_hits: int, max_pulls: int,
                            hits_per_spark: int = None,
                            spark_policy: SparkPolicy = SparkPolicy.BLOCK_COMPLETE) -> np.ndarray:
        """
        模拟得到经验曲线族，形状 (max_hits, max_pulls)
        [r][i]: 前 i+1 抽内命中数（加上井数）>= r+1 的频率
        """
        rng = np.random.default_rng(self.config.seed)
        reached = np.zeros((max_hits, max_pulls), dtype=np.int64)
        targets = np.arange(1, max_hits + 1)[:, None]

        sparks = None
        if hits_per_spark:
            sparks = sparks_banked(np.arange(max_pulls), hits_per_spark, spark_policy)

        print(f"正在模拟 {max_pulls} 抽，共 {self.iterations} 次...")
        done = 0
        while done < self.iterations:
            size = min(CHUNK_SIZE, self.iterations - done)
            hits = rng.random((size, max_pulls)) < focus_probability
            counts = np.cumsum(hits, axis=1, dtype=np.int32)
            if sparks is not None:
                counts = counts + sparks
            # (size, 1, N) 与 (R, 1) 比较 -> (size, R, N)，按模拟次数求和
            reached += (counts[:, None, :] >= targets).sum(axis=0)
            done += size
            print(f"进度: {done}/{self.iterations}")

        return reached / self.iterations

    def print_results(self, empirical: np.ndarray, analytic: np.ndarray, checkpoints=None):
        """打印经验值与解析值的对比"""
        analytic = np.asarray(analytic)
        max_hits, max_pulls = empirical.shape
        if checkpoints is None:
            checkpoints = [p for p in (50, 100, 200, 400, 600, 800, 1000) if p <= max_pulls]

        print("\n" + "=" * 60)
        print("【蒙特卡洛验证】")
        print("=" * 60)
        print(f"\n模拟次数: {self.iterations}")
        print(f"最大偏差: {np.max(np.abs(empirical - analytic)):.4f}")

        header = "抽数".ljust(8) + "".join(f"{r + 1}次命中".rjust(20) for r in range(max_hits))
        print("\n" + header)
        for pulls in checkpoints:
            cells = "".join(
                f"{empirical[r, pulls - 1]:>9.4f} / {analytic[r, pulls - 1]:<8.4f}"
                for r in range(max_hits)
            )
            print(f"{pulls:<8}{cells}")
        print("（模拟值 / 解析值）")

        print("\n" + "=" * 60 + "\n")
