"""
核心抽卡模拟器
"""
import random
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Tuple

from rates import DRAW_ORDER, Distribution, PullType, RateTable, Rarity


def draw(distribution: Distribution, rng=None) -> Rarity:
    """
    按给定分布抽一次

    按 DRAW_ORDER 累加概率，随机数落在累积和之下即返回该稀有度。
    浮点误差导致累积和略小于1而没有选中任何一项时，返回 DRAW_ORDER 最后一项。
    rng: 任何带 random() 方法的对象（random.Random、numpy Generator），默认使用 random 模块
    """
    if rng is None:
        rng = random
    rand = rng.random()
    cumulative = 0.0
    for rarity in DRAW_ORDER:
        cumulative += distribution.get(rarity, 0.0)
        if rand < cumulative:
            return rarity
    return DRAW_ORDER[-1]


@dataclass(frozen=True)
class PullResult:
    """一次抽取（单抽或十连）的结果，长度等于抽数"""
    pull_type: PullType
    rarities: Tuple[Rarity, ...]

    def __post_init__(self):
        assert len(self.rarities) == self.pull_type.value, "结果数量必须等于抽数"

    def __len__(self):
        return len(self.rarities)

    def __iter__(self):
        return iter(self.rarities)

    def __getitem__(self, index):
        return self.rarities[index]

    def count(self, rarity: Rarity) -> int:
        return sum(1 for r in self.rarities if r is rarity)

    def hits(self, focus: Rarity = Rarity.SSR_FOCUS) -> int:
        """命中（抽到目标UP）的次数"""
        return self.count(focus)


def draw_batch(rate_table: RateTable, pull_type: PullType, rng=None) -> PullResult:
    """每个抽位使用各自的分布独立抽取"""
    pull_type = PullType(pull_type)
    positions = rate_table.positions(pull_type)
    return PullResult(pull_type, tuple(draw(dist, rng) for dist in positions))


class PullSimulator:
    """抽卡模拟器"""

    def __init__(self, rate_table: RateTable, seed: int = None):
        self.rate_table = rate_table
        self.rng = random.Random(seed)
        self.total_pulls = 0  # 累计抽数
        self.tally: Dict[Rarity, int] = Counter()  # 各稀有度累计出现次数

    def reset(self):
        """清空统计（不重置随机数状态）"""
        self.total_pulls = 0
        self.tally = Counter()

    def pull(self, pull_type: PullType) -> PullResult:
        result = draw_batch(self.rate_table, pull_type, self.rng)
        self.total_pulls += len(result)
        self.tally.update(result.rarities)
        return result

    def pull_one(self) -> PullResult:
        """单抽"""
        return self.pull(PullType.ONE)

    def pull_ten(self) -> PullResult:
        """十连"""
        return self.pull(PullType.TEN)
