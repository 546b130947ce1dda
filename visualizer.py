"""
数据可视化模块
用于绘制命中概率曲线族和抽卡频率
"""

import warnings

import matplotlib
from matplotlib import font_manager
import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np
from typing import Dict, Tuple

from rates import Rarity
from stats_engine import DistributionFamily

sns.set_theme(style="whitegrid", context="paper", font_scale=1.2)

# 图表标签为中文，依次尝试常见的中文字体
CJK_FONTS = ('Noto Sans CJK SC', 'Source Han Sans SC', 'SimHei', 'Microsoft YaHei', 'PingFang SC')

COLORS = {
    'highlight': '#D62728',   # 高亮曲线
    'poi': '#1F77B4',         # 选中的点
    'expected': '#7F7F7F',    # 理论值
    'palette': sns.color_palette('tab10', 6).as_hex(),
}


def use_cjk_font() -> bool:
    """找到可用的中文字体时设为默认字体并返回 True"""
    for name in CJK_FONTS:
        try:
            font_manager.findfont(name, fallback_to_default=False)
        except ValueError:
            continue
        matplotlib.rcParams['font.sans-serif'] = [name]
        matplotlib.rcParams['axes.unicode_minus'] = False
        return True
    warnings.warn("未找到可用的中文字体，图表文字可能显示为方框")
    return False


use_cjk_font()


def _finish_axes(ax, xlabel: str, ylabel: str, title: str):
    ax.set_xlabel(xlabel, fontsize=13, fontweight='bold')
    ax.set_ylabel(ylabel, fontsize=13, fontweight='bold')
    ax.set_title(title, fontsize=15, fontweight='bold', pad=20)
    ax.grid(True, linestyle='--', linewidth=0.8, alpha=0.7)
    sns.despine(ax=ax)


def _save(save_path: str, default_name: str) -> str:
    path = save_path or default_name
    plt.tight_layout()
    plt.savefig(path, dpi=200, bbox_inches='tight')
    print(f"图表已保存至: {path}")
    plt.close()
    return path


class HitDistributionVisualizer:
    """命中概率可视化器"""

    def __init__(self):
        self.colors = COLORS

    def plot_family(self, family: DistributionFamily, point_of_interest: Tuple[int, int] = None,
                    save_path: str = None) -> str:
        """
        绘制曲线族：横轴为抽数，纵轴为累积概率
        高亮 family.highlight 对应的曲线
        point_of_interest: (命中数, 抽数)，在图上标出该点
        """
        fig, ax = plt.subplots(figsize=(12, 6))

        pulls = np.arange(1, family.max_pulls + 1)
        for r, row in enumerate(family.values):
            selected = r == family.highlight
            ax.plot(pulls, row,
                    label=f'≥{r + 1}次命中',
                    color=self.colors['highlight'] if selected else self.colors['palette'][r % 6],
                    linewidth=2.8 if selected else 1.4,
                    alpha=1.0 if selected else 0.55,
                    zorder=3 if selected else 2)

        if point_of_interest is not None:
            hits, pull_count = point_of_interest
            x, y = family.point_of_interest(hits, pull_count)
            ax.scatter([x], [y], s=60, color=self.colors['poi'], zorder=4)
            ax.axvline(x=x, color=self.colors['poi'], linestyle='--', linewidth=1.2, alpha=0.6)
            ax.axhline(y=y, color=self.colors['poi'], linestyle='--', linewidth=1.2, alpha=0.6)
            ax.annotate(f'({x}, {y:.4f})', (x, y), textcoords='offset points', xytext=(8, -16),
                        fontsize=10, color=self.colors['poi'])

        title = f'累积命中概率（单抽UP概率 {family.focus_probability * 100:.2f}%）'
        if family.sparks_applied:
            title += f' - 含井（每{family.hits_per_spark}抽）'
        _finish_axes(ax, '抽数', '概率', title)
        ax.set_xlim(0, family.max_pulls)
        ax.set_ylim(0, 1.02)
        ax.legend(fontsize=11, frameon=True, shadow=True, loc='lower right')
        return _save(save_path, 'hit_distribution.png')

    def plot_rarity_frequencies(self, frequencies: Dict[Rarity, float],
                                expected: Dict[Rarity, float] = None, save_path: str = None) -> str:
        """绘制各稀有度出现频率（可与理论值对比）"""
        fig, ax = plt.subplots(figsize=(10, 5))

        rarities = list(Rarity)
        x = np.arange(len(rarities))
        width = 0.38 if expected else 0.6

        observed = [frequencies.get(r, 0.0) * 100 for r in rarities]
        bars = ax.bar(x - (width / 2 if expected else 0), observed, width, label='模拟',
                      color=self.colors['palette'][0], alpha=0.85, edgecolor='white', linewidth=1.5)
        if expected:
            ax.bar(x + width / 2, [expected.get(r, 0.0) * 100 for r in rarities], width,
                   label='理论', color=self.colors['expected'], alpha=0.85,
                   edgecolor='white', linewidth=1.5)

        for bar in bars:
            height = bar.get_height()
            if height > 0:
                ax.text(bar.get_x() + bar.get_width() / 2., height, f'{height:.2f}%',
                        ha='center', va='bottom', fontsize=9)

        _finish_axes(ax, '稀有度', '频率 (%)', '各稀有度出现频率')
        ax.set_xticks(x)
        ax.set_xticklabels([r.value for r in rarities], fontsize=11)
        ax.legend(fontsize=11, frameon=True, shadow=True)
        return _save(save_path, 'rarity_frequencies.png')
