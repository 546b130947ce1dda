"""
负二项分布累积概率

"第 r 次命中发生在第 n 抽之内" 等价于 "n 抽中至少命中 r 次"，
而二项分布的尾概率满足 P(X >= r) = I_p(r, n - r + 1)。
"""
import math

import numpy as np

from beta_function import beta_inc


def default_support(r: int, p: float) -> int:
    """默认横轴长度 r + ceil(10/p)，足以让曲线在图上接近1"""
    if p <= 0:
        raise ValueError("p 为0时必须显式指定 max_support")
    return r + math.ceil(10 / p)


def neg_binom_cdf(r: int, p: float, max_support: int = None) -> np.ndarray:
    """
    返回长度为 max_support 的数组，第 k 项（抽数 k+1）为
    k+1 次独立伯努利(p)试验中至少成功 r 次的概率。

    p=0: 全为0
    p=1: 下标 r-1 之前为0，之后为1
    r=0: 全为1（不需要命中）
    """
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"p 必须在 [0, 1] 内: {p}")
    if r < 0:
        raise ValueError(f"r 不能为负数: {r}")
    if max_support is None:
        max_support = default_support(r, p)
    if max_support < 0:
        raise ValueError(f"max_support 不能为负数: {max_support}")

    cdf = np.zeros(max_support, dtype=float)
    if r == 0:
        cdf[:] = 1.0
        return cdf

    # 抽数不足 r 时不可能命中 r 次，保持为0
    for k in range(r - 1, max_support):
        trials = k + 1
        cdf[k] = beta_inc(p, r, trials - r + 1)
    return cdf


def neg_binom_pmf(n: int, r: int, p: float) -> float:
    """第 r 次命中恰好发生在第 n 抽的概率"""
    if n < r or r < 1:
        return 0.0
    return math.comb(n - 1, r - 1) * p ** r * (1 - p) ** (n - r)


def expected_pulls(r: int, p: float) -> float:
    """获得 r 次命中的期望抽数"""
    if p <= 0:
        return math.inf
    return r / p
