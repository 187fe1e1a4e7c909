import argparse
import sys

import matplotlib.pyplot as plt
from memory_manager import CorruptStateError
from simulator import VirtualMemorySimulator

DEFAULT_FRAME_COUNTS = [8, 16, 24, 32, 48, 64]

metrics = ['page_faults', 'disk_accesses', 'dirty_writes']
titles = ['Page Faults', 'Disk Accesses', 'Dirty Page Writes']


def sweep_frame_counts(trace_file, frame_counts=DEFAULT_FRAME_COUNTS):
    """Replay one trace once per frame pool size."""
    results = {}
    for num_frames in frame_counts:
        simulator = VirtualMemorySimulator(num_frames=num_frames)
        stats = simulator.run_simulation(trace_file)
        results[num_frames] = {metric: getattr(stats, metric) for metric in metrics}
    return results


def plot_sweep(results, output='frame_sweep.png', label=None):
    frame_counts = sorted(results)
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    fig.suptitle(f'Frame Pool Size Comparison{": " + label if label else ""}',
                 fontsize=14, fontweight='bold')

    x = range(len(frame_counts))
    for idx, (metric, title) in enumerate(zip(metrics, titles)):
        ax = axes[idx]
        values = [results[n][metric] for n in frame_counts]
        bars = ax.bar(x, values, 0.6)

        for bar in bars:
            height = bar.get_height()
            ax.text(bar.get_x() + bar.get_width()/2., height,
                    f'{int(height)}', ha='center', va='bottom', fontsize=9)

        ax.set_title(title)
        ax.set_xlabel('Frames')
        ax.set_xticks(list(x))
        ax.set_xticklabels([str(n) for n in frame_counts])
        ax.grid(axis='y', alpha=0.3)

    plt.tight_layout()
    fig.savefig(output, dpi=300, bbox_inches='tight')
    return fig


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Plot faults and disk accesses of a trace across frame pool sizes.')
    parser.add_argument('trace_file')
    parser.add_argument('--frames', type=int, nargs='+', default=DEFAULT_FRAME_COUNTS,
                        help='Frame counts to simulate (default: %(default)s)')
    parser.add_argument('-o', '--output', default='frame_sweep.png')
    parser.add_argument('--show', action='store_true', help='Open the plot window')
    args = parser.parse_args(argv)

    bad = [n for n in args.frames if n <= 0]
    if bad:
        print(f"Invalid configuration: frame counts must be positive, got {bad}", file=sys.stderr)
        return 1

    print("Running simulations...")
    try:
        results = sweep_frame_counts(args.trace_file, args.frames)
    except OSError as e:
        print(f"Invalid file: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error while parsing file: {e}", file=sys.stderr)
        return 1
    except CorruptStateError as e:
        print(f"Fatal internal error: {e}", file=sys.stderr)
        return 2

    print(f"{'Frames':<10} {'Page Faults':<15} {'Disk Accesses':<15} {'Dirty Writes':<15}")
    print("-" * 55)
    for num_frames in sorted(results):
        r = results[num_frames]
        print(f"{num_frames:<10} {r['page_faults']:<15} {r['disk_accesses']:<15} {r['dirty_writes']:<15}")

    plot_sweep(results, args.output, label=args.trace_file)
    print(f"\nGraph saved as '{args.output}'")
    if args.show:
        plt.show()
    return 0


if __name__ == '__main__':
    sys.exit(main())
