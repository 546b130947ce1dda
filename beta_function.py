"""
正则化不完全Beta函数 I_x(a, b)

负二项分布的累积概率通过它计算。
采用连分式展开 + 修正Lentz算法（参见 Numerical Recipes §6.4），
当 x > (a+1)/(a+b+2) 时利用对称性 I_x(a,b) = 1 - I_{1-x}(b,a)，
保证连分式在 a、b 上千时也只需 O(sqrt(max(a,b))) 次迭代。
"""
import math

from errors import ConvergenceError, DomainError

MAX_ITERATIONS = 10000
EPSILON = 1e-15
TINY = 1e-300  # 防止Lentz算法中出现除零


def log_beta(a: float, b: float) -> float:
    """ln B(a, b)"""
    return math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)


def _continued_fraction(x: float, a: float, b: float) -> float:
    qab = a + b
    qap = a + 1.0
    qam = a - 1.0

    c = 1.0
    d = 1.0 - qab * x / qap
    if abs(d) < TINY:
        d = TINY
    d = 1.0 / d
    h = d

    for m in range(1, MAX_ITERATIONS + 1):
        m2 = 2 * m

        # 偶数项
        aa = m * (b - m) * x / ((qam + m2) * (a + m2))
        d = 1.0 + aa * d
        if abs(d) < TINY:
            d = TINY
        c = 1.0 + aa / c
        if abs(c) < TINY:
            c = TINY
        d = 1.0 / d
        h *= d * c

        # 奇数项
        aa = -(a + m) * (qab + m) * x / ((a + m2) * (qap + m2))
        d = 1.0 + aa * d
        if abs(d) < TINY:
            d = TINY
        c = 1.0 + aa / c
        if abs(c) < TINY:
            c = TINY
        d = 1.0 / d
        delta = d * c
        h *= delta

        if abs(delta - 1.0) < EPSILON:
            return h

    raise ConvergenceError(f"连分式未收敛: x={x}, a={a}, b={b}")


def beta_inc(x: float, a: float, b: float) -> float:
    """
    正则化不完全Beta函数 I_x(a, b)，返回值在 [0, 1]

    x: [0, 1]
    a, b: 正数
    超出定义域时抛出 DomainError
    """
    if not (0.0 <= x <= 1.0):  # 同时排除 NaN
        raise DomainError(f"x 必须在 [0, 1] 内: {x}")
    if not (a > 0 and math.isfinite(a)):
        raise DomainError(f"a 必须为正数: {a}")
    if not (b > 0 and math.isfinite(b)):
        raise DomainError(f"b 必须为正数: {b}")

    if x == 0.0:
        return 0.0
    if x == 1.0:
        return 1.0

    # x^a (1-x)^b / B(a,b)，取对数避免溢出
    log_front = a * math.log(x) + b * math.log1p(-x) - log_beta(a, b)
    front = math.exp(log_front)

    if x < (a + 1.0) / (a + b + 2.0):
        value = front * _continued_fraction(x, a, b) / a
    else:
        value = 1.0 - front * _continued_fraction(1.0 - x, b, a) / b

    return min(max(value, 0.0), 1.0)
