"""
异常类型
"""


class GachaStatsError(Exception):
    """所有计算错误的基类"""


class InvalidRateError(GachaStatsError, ValueError):
    """概率表不合法（某一抽位的概率之和超过1、出现负数等）"""


class DomainError(GachaStatsError, ValueError):
    """数值函数的参数超出定义域"""


class ConvergenceError(GachaStatsError, ArithmeticError):
    """连分式在迭代上限内未收敛"""
