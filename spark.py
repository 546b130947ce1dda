"""
井（spark）机制修正

每抽满 hits_per_spark 抽（不论是否命中）获得一次"井"，
一次井可以直接兑换一次命中。
因此"抽到第 i+1 抽时至少 r+1 次命中"在有 s 次井时，
只需要原本的 r+1-s 次命中即可。
"""
from enum import Enum
from typing import List, Sequence

import numpy as np


class SparkPolicy(Enum):
    """井的计数方式"""
    BLOCK_COMPLETE = "block_complete"  # 抽满一整段即获得: floor((i+1)/h)
    NEXT_PULL = "next_pull"  # 抽满后的下一抽才可用: floor(i/h)


def sparks_banked(pull_index, hits_per_spark: int,
                  policy: SparkPolicy = SparkPolicy.BLOCK_COMPLETE):
    """第 pull_index 抽（从0开始）时已有的井数，pull_index 可以是 numpy 数组"""
    if policy is SparkPolicy.BLOCK_COMPLETE:
        return (pull_index + 1) // hits_per_spark
    return pull_index // hits_per_spark


def apply_sparks(base_family: Sequence[Sequence[float]], hits_per_spark: int,
                 policy: SparkPolicy = SparkPolicy.BLOCK_COMPLETE) -> List[np.ndarray]:
    """
    把不含井的累积概率曲线族转换为考虑井之后的曲线族

    base_family[r][i]: 前 i+1 抽至少 r+1 次命中的概率
    输出第 r 条曲线与输入第 r 条等长：
    - 井数 >= r+1 时概率为1
    - 否则取 base_family[r - 井数][i]，该曲线长度不足时视为已饱和（1.0）
    """
    if hits_per_spark < 1:
        raise ValueError(f"hits_per_spark 必须为正整数: {hits_per_spark}")

    rows = [np.asarray(row, dtype=float) for row in base_family]
    adjusted = []
    for r, row in enumerate(rows):
        indices = np.arange(len(row))
        sparks = sparks_banked(indices, hits_per_spark, policy)
        out = np.ones(len(row), dtype=float)
        for s in range(min(r, int(sparks.max(initial=0))) + 1):
            source = rows[r - s]
            # 同一井数的下标，且在来源曲线的范围内
            idx = indices[(sparks == s) & (indices < len(source))]
            out[idx] = source[idx]
        adjusted.append(out)
    return adjusted
