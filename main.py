"""
抽卡命中概率计算器 - 主程序入口

运行此文件以输出默认卡池（单UP）的统计结果

核心思路：
1. 单抽目标UP概率为 p，前 n 抽内至少命中 r 次的概率为负二项分布的累积概率，
   用正则化不完全Beta函数计算：P = I_p(r, n - r + 1)
2. 井：每抽满200抽可以直接兑换一次命中，相当于把所需命中数减去已有井数
3. 十连最后一抽保底SR以上，但只影响抽卡结果，不影响目标UP的命中曲线
"""

from config import StatsConfig
from monte_carlo_analyzer import MonteCarloAnalyzer
from rates import SINGLE_FOCUS_RATES, PullType
from simulator_core import PullSimulator
from stats_engine import DistributionFamily, StatsEngine
from visualizer import HitDistributionVisualizer

CHECKPOINTS = (50, 100, 200, 300, 400, 600, 800, 1000)


def print_family(title: str, family: DistributionFamily):
    print("\n" + "▶" * 30)
    print(title)
    print("▶" * 30)
    print("抽数".ljust(8) + "".join(f"≥{r + 1}次".rjust(10) for r in range(family.max_hits)))
    for pulls in CHECKPOINTS:
        if pulls > family.max_pulls:
            break
        cells = "".join(f"{family.probability(r + 1, pulls):>10.4f}" for r in range(family.max_hits))
        print(f"{pulls:<8}{cells}")

    print("\n达到目标概率所需抽数:")
    for r in range(family.max_hits):
        half = family.pulls_needed(r + 1, 0.5)
        most = family.pulls_needed(r + 1, 0.9)
        print(f"  • ≥{r + 1}次命中: 50% → {half or '窗口外'} 抽, 90% → {most or '窗口外'} 抽")


def main():
    """主函数"""
    config = StatsConfig(seed=42)
    rates = SINGLE_FOCUS_RATES
    focus = rates.focus_probability(config.focus_rarity)

    print("=" * 60)
    print("抽卡命中概率计算器")
    print("=" * 60)
    print("\n当前规则:")
    print(f"  • 目标UP ({config.focus_rarity.value}) 单抽概率: {focus * 100}%")
    print(f"  • 井: 每{config.hits_per_spark}抽可兑换一次命中")
    print(f"  • 追踪命中数: 1~{config.max_hits}")
    print(f"  • 统计窗口: {config.max_pulls}抽")
    print()

    engine = StatsEngine(config)
    raw = engine.family_for(rates, apply_spark=False)
    sparked = engine.family_for(rates, apply_spark=True)

    print_family("不使用井", raw)
    print_family(f"使用井（每{config.hits_per_spark}抽）", sparked)

    poi_pulls, poi_prob = raw.point_of_interest(1, 200)
    print(f"\n选中点: 200抽内至少命中1次 → ({poi_pulls}, {poi_prob:.6f})")

    # ========== 模拟抽卡 ==========
    print("\n" + "=" * 60)
    print("模拟十连")
    print("=" * 60)
    simulator = PullSimulator(rates, seed=config.seed)
    result = simulator.pull(config.batch_size)
    print("  " + " | ".join(r.value for r in result))
    print(f"  目标UP命中: {result.hits(config.focus_rarity)}")

    # ========== 蒙特卡洛验证 ==========
    analyzer = MonteCarloAnalyzer(config)
    empirical = analyzer.simulate_hit_family(focus, config.max_hits, config.max_pulls)
    analyzer.print_results(empirical, raw.values)

    frequencies = analyzer.estimate_rarity_frequencies(rates, PullType.TEN)
    expected = analyzer.expected_frequencies(rates, PullType.TEN)

    # ========== 图表 ==========
    print("\n" + "=" * 60)
    print("正在生成可视化图表...")
    print("=" * 60)
    visualizer = HitDistributionVisualizer()
    print("\n[1/3] 生成命中概率曲线...")
    visualizer.plot_family(raw, point_of_interest=(1, 200), save_path='hit_distribution.png')
    print("\n[2/3] 生成含井命中概率曲线...")
    visualizer.plot_family(sparked, save_path='hit_distribution_spark.png')
    print("\n[3/3] 生成稀有度频率图...")
    visualizer.plot_rarity_frequencies(frequencies, expected, save_path='rarity_frequencies.png')

    print("\n所有图表生成完成！")


if __name__ == "__main__":
    main()
