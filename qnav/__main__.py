"""Main entry point for the Q-Learning navigation demo."""

import argparse
import signal
import sys
from PySide6.QtCore import QCoreApplication, QTimer

from .domain.types import SimulationConfig


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Multi-agent Q-learning navigation demo")
    parser.add_argument("--agents", type=int, default=1, help="Number of agents to start with (max 10)")
    parser.add_argument("--frames", type=int, default=3600, help="Frames to run before exiting (0 = run until interrupted)")
    parser.add_argument("--fps", type=int, default=60, help="Frames per second")
    parser.add_argument("--learning-rate", type=float, default=0.1, help="Learning rate (alpha)")
    parser.add_argument("--epsilon", type=float, default=0.3, help="Exploration rate")
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--report-every", type=int, default=300, help="Frames between progress lines")
    args = parser.parse_args(argv)
    if args.fps <= 0:
        parser.error("--fps must be positive")
    return args


def main(argv=None):
    """Run the frame-driven simulation without a renderer."""
    args = parse_args(argv)

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("Q-Learning Navigation")
    app.setApplicationVersion("1.0.0")

    from .app.controller import SimulationController

    config = SimulationConfig(initial_agents=max(1, min(args.agents, 10)))
    controller = SimulationController(config, seed=args.seed, frame_interval=max(1, 1000 // args.fps))
    if not controller.update_config(learning_rate=args.learning_rate, epsilon=args.epsilon,
                                    speed_multiplier=args.speed):
        print("Invalid tunables, see --help")
        return 2

    controller.error_occurred.connect(lambda message: print(f"Error: {message}"))

    def on_frame():
        frames = controller.frame_count
        if args.report_every and frames % args.report_every == 0:
            stats = controller.get_statistics()
            print(f"Frame {frames}: episodes={stats['episodes']} steps={stats['steps']} "
                  f"reward={stats['total_reward']:.2f} success={stats['success_rate']:.1%}")
        if args.frames and frames >= args.frames:
            controller.cleanup()
            app.quit()

    controller.frame_completed.connect(on_frame)

    def signal_handler(sig, frame):
        """Handle system signals for graceful shutdown."""
        print(f"\nReceived signal {sig}, shutting down gracefully...")
        controller.cleanup()
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Let Python signal handlers run while Qt owns the main loop
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(200)

    controller.start_training()
    controller.start_frames()
    try:
        return app.exec()
    finally:
        controller.cleanup()


if __name__ == "__main__":
    sys.exit(main())
