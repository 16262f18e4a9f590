"""
Main Entry Point for Gridworld Reinforcement Learning.

Runs value iteration or Deep Q-learning on a named or random gridworld.

Usage:
    python -m gridworld_rl.main value-iteration [options]
    python -m gridworld_rl.main dql [options]

Examples:
    # Solve the exemplary grid exactly, without move noise
    python -m gridworld_rl.main value-iteration --layout exemplary --noise 0

    # Deep Q-learning with experience replay on the cliff layout
    python -m gridworld_rl.main dql --layout cliff --episodes 300 --epsilon -1

    # Non-replay variant on a random 5x5 grid, regenerated every episode
    python -m gridworld_rl.main dql --layout -1 --width 5 --height 5 \\
        --no-replay --regenerate
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .agents import ApproximatorQSource, EpisodeController
from .algorithms import ValueIterationEngine
from .core import (
    DeepQLearningConfig,
    GridworldConfig,
    GridworldError,
    ValueIterationConfig,
)
from .environment import Gridworld, RewardModel, TransitionModel
from .networks import TorchQApproximator
from .utils import (
    print_separator,
    render_policy,
    render_q_table,
    render_values,
    set_seed,
)

logger = logging.getLogger(__name__)


def _add_grid_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--layout",
        type=str,
        default="exemplary",
        help="Layout name or number (exemplary, cliff, discount, bridge, book, "
             "maze; -1 for random) (default: exemplary)",
    )
    parser.add_argument("--width", type=int, default=None, help="Grid width")
    parser.add_argument("--height", type=int, default=None, help="Grid height")
    parser.add_argument(
        "--step-reward", type=float, default=0.0,
        help="Reward for entering a non-terminal cell (default: 0.0)",
    )
    parser.add_argument(
        "--discount", type=float, default=0.9,
        help="Discount rate gamma (default: 0.9)",
    )
    parser.add_argument(
        "--noise", type=float, default=0.2,
        help="Move noise probability (default: 0.2)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Value iteration and Deep Q-learning on gridworlds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    vi = subparsers.add_parser("value-iteration", help="Solve the grid exactly")
    _add_grid_arguments(vi)
    vi.add_argument(
        "--tolerance", type=float, default=1e-4,
        help="Convergence threshold on sum |dV| (default: 1e-4)",
    )
    vi.add_argument(
        "--max-sweeps", type=int, default=1000,
        help="Sweep cap (default: 1000)",
    )

    dql = subparsers.add_parser("dql", help="Deep Q-learning")
    _add_grid_arguments(dql)
    dql.add_argument(
        "--episodes", type=int, default=200,
        help="Number of training episodes (default: 200)",
    )
    dql.add_argument(
        "--max-steps", type=int, default=100,
        help="Step cap per episode (default: 100)",
    )
    dql.add_argument(
        "--learning-rate", type=float, default=5e-3,
        help="Learning rate (default: 5e-3)",
    )
    dql.add_argument(
        "--weight-decay", type=float, default=0.0,
        help="L2 weight decay (default: 0.0)",
    )
    dql.add_argument(
        "--epsilon", type=float, default=0.1,
        help="Exploration rate; negative anneals max(0.1, 1/(1+sqrt(k))) "
             "(default: 0.1)",
    )
    dql.add_argument(
        "--buffer-size", type=int, default=100,
        help="Replay capacity (default: 100)",
    )
    dql.add_argument(
        "--batch-size", type=int, default=1,
        help="Replay mini-batch size and minimum fill (default: 1)",
    )
    dql.add_argument(
        "--no-replay", action="store_true",
        help="Train on the current transition only",
    )
    dql.add_argument(
        "--encoding", type=str, default="channels", choices=["channels", "agent"],
        help="State encoding (default: channels)",
    )
    dql.add_argument(
        "--regenerate", action="store_true",
        help="Regenerate the grid at every episode start",
    )
    dql.add_argument("--checkpoint", type=str, default=None, help="Checkpoint path")
    dql.add_argument("--save", action="store_true", help="Save after every episode")
    dql.add_argument("--load", action="store_true", help="Load before training")

    return parser.parse_args(argv)


def _grid_config(args: argparse.Namespace) -> GridworldConfig:
    return GridworldConfig(
        layout=args.layout,
        width=args.width,
        height=args.height,
        step_reward=args.step_reward,
        discount_rate=args.discount,
        move_noise=args.noise,
        seed=args.seed,
    )


def run_value_iteration(args: argparse.Namespace) -> int:
    grid_config = _grid_config(args)
    rng = set_seed(grid_config.seed)
    grid = Gridworld.from_config(grid_config, rng)

    engine = ValueIterationEngine(
        grid,
        TransitionModel(grid, grid_config.move_noise, rng),
        RewardModel(grid, grid_config.step_reward),
        grid_config.discount_rate,
        ValueIterationConfig(tolerance=args.tolerance, max_sweeps=args.max_sweeps),
    )
    result = engine.run()

    print_separator("Grid")
    print(grid.to_string())
    print_separator(f"State values after {result.sweeps} sweeps")
    print(render_values(grid, result.state_value_table))
    print_separator("Greedy policy")
    print(render_policy(grid, engine.extract_policy()))
    print_separator("Greedy path")
    print(" -> ".join(str(pos) for pos in engine.greedy_path()))
    return 0


def run_deep_q_learning(args: argparse.Namespace) -> int:
    grid_config = _grid_config(args)
    dql_config = DeepQLearningConfig(
        learning_rate=args.learning_rate,
        weight_decay=args.weight_decay,
        epsilon=args.epsilon,
        buffer_size=args.buffer_size,
        batch_size=args.batch_size,
        use_experience_replay=not args.no_replay,
        encoding=args.encoding,
        regenerate_grid=args.regenerate,
        max_steps_per_episode=args.max_steps,
        checkpoint_path=args.checkpoint,
        save_checkpoint=args.save,
        load_checkpoint=args.load,
    )
    rng = set_seed(grid_config.seed)
    grid = Gridworld.from_config(grid_config, rng)

    approximator = TorchQApproximator(
        dql_config.encoding_mode.input_size(grid.width, grid.height),
        dql_config.hidden_dims,
        dql_config.get_device(),
    )
    q_source = ApproximatorQSource(
        approximator,
        dql_config.encoding_mode,
        dql_config.learning_rate,
        dql_config.weight_decay,
    )
    controller = EpisodeController(
        grid,
        TransitionModel(grid, grid_config.move_noise, rng),
        RewardModel(grid, grid_config.step_reward),
        q_source,
        dql_config,
        grid_config.discount_rate,
        rng,
        grid_factory=lambda: Gridworld.from_config(grid_config, rng),
    )

    controller.train(args.episodes)

    print_separator("Q-responses")
    print(render_q_table(controller.grid, lambda pos: q_source.estimate(controller.grid, pos)))
    print_separator("Statistics")
    for name, value in controller.statistics.summary().items():
        print(f"{name:>40s}: {value:.3f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        if args.command == "value-iteration":
            return run_value_iteration(args)
        return run_deep_q_learning(args)
    except GridworldError as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
