"""
概率表模块

每种抽卡方式（单抽 / 十连）对应一组按抽位排列的概率分布。
十连的最后一抽可以和前面不同（例如最后一抽保底SR以上），
所以概率表按抽位逐个保存，而不是每种抽法只保存一份。
"""
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Union

from errors import InvalidRateError

DEFAULT_TOLERANCE = 1e-9


class Rarity(Enum):
    """稀有度（按从低到高排列）"""
    R = "R"
    R_FOCUS = "R Focus"
    SR = "SR"
    SR_FOCUS = "SR Focus"
    SSR = "SSR"
    SSR_FOCUS = "SSR Focus"

    @property
    def is_focus(self) -> bool:
        """是否为UP（玩家想要的那一档）"""
        return self in _FOCUS_TO_BASE

    @property
    def tier(self) -> "Rarity":
        """对应的非UP稀有度"""
        return _FOCUS_TO_BASE.get(self, self)

    @property
    def focus_variant(self) -> "Rarity":
        """对应的UP稀有度"""
        return _BASE_TO_FOCUS[self.tier]

    def next_tier(self):
        """高一档的非UP稀有度，已经是最高档时返回 None"""
        idx = _TIERS.index(self.tier)
        if idx + 1 < len(_TIERS):
            return _TIERS[idx + 1]
        return None

    @classmethod
    def parse(cls, label: Union["Rarity", str]) -> "Rarity":
        """接受枚举本身、枚举名（"SSR_FOCUS"）或显示值（"SSR Focus"）"""
        if isinstance(label, cls):
            return label
        try:
            return cls[label]
        except KeyError:
            pass
        try:
            return cls(label)
        except ValueError:
            raise InvalidRateError(f"未知稀有度: {label!r}") from None


_TIERS = (Rarity.R, Rarity.SR, Rarity.SSR)
_FOCUS_TO_BASE = {
    Rarity.R_FOCUS: Rarity.R,
    Rarity.SR_FOCUS: Rarity.SR,
    Rarity.SSR_FOCUS: Rarity.SSR,
}
_BASE_TO_FOCUS = {base: focus for focus, base in _FOCUS_TO_BASE.items()}

# 抽卡时累加概率的固定顺序，最后一项（R）同时是舍入误差时的兜底结果
DRAW_ORDER = (
    Rarity.SSR_FOCUS,
    Rarity.SSR,
    Rarity.SR_FOCUS,
    Rarity.SR,
    Rarity.R_FOCUS,
    Rarity.R,
)

# 简化输入只需要给出这四档，R 由剩余概率补齐
SIMPLE_RATE_KEYS = (Rarity.SSR, Rarity.SSR_FOCUS, Rarity.SR, Rarity.SR_FOCUS)


class PullType(Enum):
    """抽卡方式，值为一次抽取的数量"""
    ONE = 1
    TEN = 10


Distribution = Mapping[Rarity, float]


def _freeze_distribution(distribution: Mapping) -> Mapping[Rarity, float]:
    """补全缺失的稀有度（概率为0），并转换成只读映射"""
    frozen = {rarity: 0.0 for rarity in Rarity}
    for key, value in distribution.items():
        frozen[Rarity.parse(key)] = float(value)
    return MappingProxyType(frozen)


def validate_distribution(distribution: Distribution, tolerance: float = DEFAULT_TOLERANCE,
                          where: str = "") -> None:
    """检查单个抽位：概率非负、有限，且总和为1"""
    for rarity, prob in distribution.items():
        if not math.isfinite(prob) or prob < 0:
            raise InvalidRateError(f"{where}{rarity.value} 的概率不合法: {prob}")
    total = math.fsum(distribution.values())
    if abs(total - 1.0) > tolerance:
        raise InvalidRateError(f"{where}概率之和为 {total!r}，应为1")


@dataclass(frozen=True, eq=False)
class RateTable:
    """
    概率表（不可变）

    tables: {PullType: (第0抽分布, 第1抽分布, ...)}
    每种抽法的分布数量必须等于该抽法的抽数。
    修改请使用 with_distribution / with_simple_rates，它们返回新的实例。
    """
    tables: Mapping[PullType, Tuple[Distribution, ...]]
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        frozen = {}
        for pull_type, positions in self.tables.items():
            pull_type = PullType(pull_type)
            positions = tuple(_freeze_distribution(d) for d in positions)
            if len(positions) != pull_type.value:
                raise InvalidRateError(
                    f"{pull_type.name} 需要 {pull_type.value} 个抽位，实际为 {len(positions)}"
                )
            for idx, dist in enumerate(positions):
                validate_distribution(dist, self.tolerance,
                                      where=f"{pull_type.name} 第{idx + 1}抽: ")
            frozen[pull_type] = positions
        # frozen dataclass 只能通过 object.__setattr__ 替换字段
        object.__setattr__(self, 'tables', MappingProxyType(frozen))

    @property
    def pull_types(self) -> Tuple[PullType, ...]:
        return tuple(self.tables)

    def positions(self, pull_type: PullType) -> Tuple[Distribution, ...]:
        try:
            return self.tables[PullType(pull_type)]
        except KeyError:
            raise KeyError(f"概率表中没有 {pull_type} 的定义") from None

    def distribution(self, pull_type: PullType, index: int) -> Distribution:
        return self.positions(pull_type)[index]

    def focus_probability(self, rarity: Rarity = Rarity.SSR_FOCUS) -> float:
        """单抽时指定稀有度的概率（命中分布的生成参数）"""
        return self.distribution(PullType.ONE, 0)[Rarity.parse(rarity)]

    def simple_rates(self) -> Dict[Rarity, float]:
        """取单抽第一抽的四档概率，作为简化输入"""
        first = self.distribution(PullType.ONE, 0)
        return {rarity: first[rarity] for rarity in SIMPLE_RATE_KEYS}

    def with_distribution(self, pull_type: PullType, index: int,
                          distribution: Mapping) -> "RateTable":
        """替换某个抽位的分布，返回新的概率表"""
        pull_type = PullType(pull_type)
        positions = list(self.positions(pull_type))
        positions[index] = distribution
        tables = dict(self.tables)
        tables[pull_type] = tuple(positions)
        return RateTable(tables, tolerance=self.tolerance)

    def with_simple_rates(self, **changes: float) -> "RateTable":
        """
        修改简化输入中的某几档并重新推导整张表
        例: table.with_simple_rates(SSR_FOCUS=0.015)
        """
        simple = self.simple_rates()
        for key, value in changes.items():
            simple[Rarity.parse(key)] = value
        batch = max(self.pull_types, key=lambda t: t.value)
        return build_single_and_batch(simple, batch_size=batch, tolerance=self.tolerance)


def build_single_and_batch(simple_rates: Mapping, batch_size: PullType = PullType.TEN,
                           tolerance: float = DEFAULT_TOLERANCE) -> RateTable:
    """
    由四档简化概率推导完整概率表

    - 单抽 / 十连前 n-1 抽：给定概率 + R（剩余概率）
    - 十连最后一抽：R 的概率全部并入高一档（SR），R 为0
    给定概率之和超过1时抛出 InvalidRateError，不做截断或归一化。
    """
    given = {rarity: 0.0 for rarity in SIMPLE_RATE_KEYS}
    for key, value in simple_rates.items():
        rarity = Rarity.parse(key)
        if rarity not in given:
            raise InvalidRateError(f"简化输入只接受 SSR / SSR Focus / SR / SR Focus，收到 {rarity.value}")
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise InvalidRateError(f"{rarity.value} 的概率不合法: {value}")
        given[rarity] = value

    declared = math.fsum(given.values())
    if declared > 1.0 + tolerance:
        raise InvalidRateError(f"概率之和不能超过1（当前为 {declared!r}）")
    remainder = max(1.0 - declared, 0.0)

    regular = dict(given)
    regular[Rarity.R] = remainder

    # 最后一抽不出R：剩余概率全部给高一档
    last = dict(given)
    receiver = Rarity.R.next_tier()
    last[receiver] = given[receiver] + remainder
    last[Rarity.R] = 0.0

    pull_type = PullType(batch_size)
    tables = {PullType.ONE: (regular,)}
    if pull_type is not PullType.ONE:
        tables[pull_type] = (regular,) * (pull_type.value - 1) + (last,)
    return RateTable(tables, tolerance=tolerance)


# ========== 预设概率表 ==========
# 单UP: SSR 3%（其中UP 0.75%），SR 18%（其中UP 2.25%），R 79%
# 十连最后一抽不出R（SR 97%）
SINGLE_FOCUS_RATES = RateTable({
    PullType.ONE: [{
        Rarity.SSR_FOCUS: 0.0075,
        Rarity.SSR: 0.0225,
        Rarity.SR_FOCUS: 0.0225,
        Rarity.SR: 0.1575,
        Rarity.R: 0.79,
    }],
    PullType.TEN: [{
        Rarity.SSR_FOCUS: 0.0075,
        Rarity.SSR: 0.0225,
        Rarity.SR_FOCUS: 0.1125,
        Rarity.SR: 0.0675,
        Rarity.R: 0.79,
    }] * 9 + [{
        Rarity.SSR_FOCUS: 0.0075,
        Rarity.SSR: 0.0225,
        Rarity.SR_FOCUS: 0.27675,
        Rarity.SR: 0.69325,
    }],
})

# 双UP: SSR 3%（其中UP 1.5%），SR 18%，R 79%
DOUBLE_FOCUS_RATES = RateTable({
    PullType.ONE: [{
        Rarity.SSR_FOCUS: 0.015,
        Rarity.SSR: 0.015,
        Rarity.SR: 0.18,
        Rarity.R: 0.79,
    }],
    PullType.TEN: [{
        Rarity.SSR_FOCUS: 0.015,
        Rarity.SSR: 0.015,
        Rarity.SR_FOCUS: 0.09,
        Rarity.SR: 0.09,
        Rarity.R: 0.79,
    }] * 9 + [{
        Rarity.SSR_FOCUS: 0.015,
        Rarity.SSR: 0.015,
        Rarity.SR_FOCUS: 0.485,
        Rarity.SR: 0.485,
    }],
})

PRESETS = {
    "单UP": SINGLE_FOCUS_RATES,
    "双UP": DOUBLE_FOCUS_RATES,
}
