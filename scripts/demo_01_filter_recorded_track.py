import os
import sys
import argparse
import logging
from datetime import datetime
import matplotlib.pyplot as plt

# Add project root to sys.path to find src
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.join(current_dir, "..")
sys.path.append(os.path.join(project_root, "src"))

from fixfilter.core.geo import DISTANCE_FUNCTIONS
from fixfilter.core.stream import FixStream
from fixfilter.metrics import summarize_evaluations
from fixfilter.modules.acceptance import FilteringReceiver, FilterThresholds, PointAcceptanceFilter


def plot_filter_results(raw_points, accepted_points, output_img, input_filename):
    """Plots raw fixes against the accepted track."""
    fig, ax = plt.subplots(figsize=(12, 12))

    ax.plot([p.lon for p in raw_points], [p.lat for p in raw_points],
            color='red', linewidth=1, alpha=0.3)
    ax.scatter([p.lon for p in raw_points], [p.lat for p in raw_points],
               color='red', s=10, alpha=0.6, label='Raw fixes')

    ax.plot([p.lon for p in accepted_points], [p.lat for p in accepted_points],
            color='blue', linewidth=2, alpha=0.8)
    ax.scatter([p.lon for p in accepted_points], [p.lat for p in accepted_points],
               color='blue', s=15, label='Accepted fixes')

    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(f"Filtered track ({input_filename})")
    ax.legend()

    plt.tight_layout()
    plt.savefig(output_img, dpi=200, bbox_inches='tight')
    print(f"Visualization saved to {output_img}")


def main():
    parser = argparse.ArgumentParser(description="Replay a recorded track through the acceptance filter.")
    parser.add_argument("--input", type=str, required=True, help="Path to the recorded track CSV file.")
    parser.add_argument("--lat-col", type=str, default="latitude")
    parser.add_argument("--lon-col", type=str, default="longitude")
    parser.add_argument("--time-col", type=str, default="time")
    parser.add_argument("--default-accuracy", type=float, default=10.0,
                        help="Accuracy in meters used when the file has no accuracy column.")
    parser.add_argument("--time-threshold-ms", type=int, default=30000)
    parser.add_argument("--accuracy-percent", type=float, default=10)
    parser.add_argument("--velocity-threshold", type=float, default=200)
    parser.add_argument("--distance", choices=sorted(DISTANCE_FUNCTIONS), default="geodesic",
                        help="Distance formula used for the implied velocity.")
    parser.add_argument("--plot", action="store_true", help="Save a plot of raw vs accepted fixes.")
    parser.add_argument("--verbose", action="store_true", help="Log every decision.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    data_path = args.input
    if not os.path.exists(data_path):
        print(f"Error: Input file {data_path} not found.")
        sys.exit(1)

    print(f"Loading data from {data_path}...")
    stream = FixStream(
        filepath=data_path,
        col_mapping={'lat': args.lat_col, 'lon': args.lon_col, 'timestamp': args.time_col},
        default_accuracy=args.default_accuracy
    )

    thresholds = FilterThresholds(
        time_threshold_ms=args.time_threshold_ms,
        accuracy_tolerance_percent=args.accuracy_percent,
        velocity_threshold_mps=args.velocity_threshold
    )
    point_filter = PointAcceptanceFilter(thresholds, distance_fn=DISTANCE_FUNCTIONS[args.distance])
    receiver = FilteringReceiver(point_filter=point_filter)

    raw_points = []
    accepted_points = []
    evaluations = []
    for point in stream:
        raw_points.append(point)
        evaluation = receiver.process_point(point)
        evaluations.append(evaluation)
        if evaluation.decision.accepted:
            accepted_points.append(point)

    summary = summarize_evaluations(evaluations)
    print(f"Processed {summary['total']} fixes.")
    print(f" - Accepted: {summary['accepted']} ({summary['acceptance_ratio']:.1%})")
    print(f" - Rejected for velocity: {summary['rejected_velocity']}")
    print(f" - Rejected for accuracy: {summary['rejected_accuracy']}")
    print(f" - Max accepted velocity: {summary['max_accepted_velocity']:.1f} m/s")

    if args.plot and raw_points:
        script_name = "demo_01_filter_recorded_track"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        input_filename = os.path.splitext(os.path.basename(data_path))[0]
        output_dir = os.path.join(project_root, "data", "processed", script_name, f"{timestamp}_{input_filename}")
        os.makedirs(output_dir, exist_ok=True)
        plot_filter_results(raw_points, accepted_points, os.path.join(output_dir, "filtered_track.png"), input_filename)


if __name__ == "__main__":
    main()
