#!/usr/bin/env python3
"""
Headless training script for the Q-learning navigation demo.
Runs the training loop for a fixed number of frames without Qt and prints progress.
"""

import argparse
import sys

from qnav.app.training_loop import TrainingLoop
from qnav.domain.types import SimulationConfig


def main(argv=None):
    parser = argparse.ArgumentParser(description="Headless multi-agent Q-learning training")
    parser.add_argument("--frames", type=int, default=20000, help="Number of frames to simulate")
    parser.add_argument("--agents", type=int, default=4, help="Number of agents (max 10)")
    parser.add_argument("--learning-rate", type=float, default=0.1, help="Learning rate (alpha)")
    parser.add_argument("--epsilon", type=float, default=0.3, help="Exploration rate")
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--report-every", type=int, default=1000, help="Frames between progress lines")

    args = parser.parse_args(argv)

    print("🧠 Q-Learning Navigation - headless training")
    print("=" * 50)

    loop = TrainingLoop(SimulationConfig(initial_agents=1), seed=args.seed)
    while len(loop.agents) < args.agents and loop.add_agent() is not None:
        pass

    try:
        loop.set_tunables(learning_rate=args.learning_rate, epsilon=args.epsilon,
                          speed_multiplier=args.speed)
    except ValueError as e:
        print(f"❌ {e}")
        return 2

    print(f"\n⚙️  Training Configuration:")
    print(f"   Frames: {args.frames}")
    print(f"   Agents: {len(loop.agents)}")
    print(f"   Learning rate: {loop.config.learning_rate}")
    print(f"   Epsilon: {loop.config.epsilon}")
    print(f"   Discount factor: {loop.config.discount_factor}")
    print(f"   Speed multiplier: {loop.config.speed_multiplier}")

    print(f"\n🚀 Starting training...")
    loop.start()
    try:
        for frame in range(1, args.frames + 1):
            loop.tick()
            if args.report_every and frame % args.report_every == 0:
                stats = loop.stats
                print(f"Frame {frame}: Episodes: {stats.episodes}, "
                      f"Success rate: {stats.success_rate:.1%}, "
                      f"Total reward: {stats.total_reward:.2f}")
    except KeyboardInterrupt:
        print(f"\n⏹️  Training interrupted by user")
        return 1
    finally:
        loop.stop()

    stats = loop.get_statistics()
    print(f"\n🎉 Training completed!")
    print(f"   Total episodes: {stats['episodes']}")
    print(f"   Successful episodes: {stats['success_count']}")
    print(f"   Success rate: {stats['success_rate']:.1%}")
    print(f"   Total steps: {stats['steps']}")
    print(f"   Total reward: {stats['total_reward']:.2f}")
    for agent in loop.agents:
        print(f"   Agent {agent.agent_id}: {len(agent.q_table)} Q-table entries")
    return 0


if __name__ == "__main__":
    sys.exit(main())
