#!/usr/bin/env python3
"""
Basic Simulation Example

This example demonstrates how to:
1. Build a race scenario in code
2. Step the race controller manually and inspect vehicle snapshots
3. Print the lap time and race time tables

Run with: python run_simulation.py
"""

from gridsim import RaceController, Track
from gridsim.car import Strategy, StrategyStep, TireCompound, VehicleConfig
from gridsim.scoring import RaceResult
from gridsim.simulation import RaceConfig


def main():
    print("=" * 60)
    print("GridSim Basic Simulation Example")
    print("=" * 60)

    # Step 1: Describe the race
    print("\n1. Building scenario...")
    config = RaceConfig(
        track=Track(length_m=4300.0, lap_count=12, name="Example Circuit"),
        base_lap_time_s=82.0,
        vehicles=(
            VehicleConfig(
                "ONE",
                base_penalty_s=0.2,
                grid_position=1,
                start_compound=TireCompound.SOFT,
                strategy=Strategy((StrategyStep(5, TireCompound.HARD),)),
            ),
            VehicleConfig(
                "TWO",
                base_penalty_s=0.4,
                driver_penalty_s=-0.1,
                grid_position=2,
                start_compound=TireCompound.HARD,
            ),
        ),
    )
    print(f"   Track: {config.track.name}")
    print(f"   Length: {config.track.length_m:.0f} meters")
    print(f"   Laps: {config.track.lap_count}")

    # Step 2: Step the race
    print("\n2. Running simulation (dt = 0.1 s)...")
    controller = RaceController(config)
    dt = 0.1
    snapshot = controller.snapshot()
    next_report_s = 120.0

    while not controller.is_finished():
        snapshot = controller.tick(dt)

        # Print standings every two simulated minutes
        if snapshot.elapsed_s >= next_report_s:
            next_report_s += 120.0
            leader = snapshot.leader
            print(f"   t = {snapshot.elapsed_s:6.1f}s: leader {leader.vehicle_id} "
                  f"on lap {leader.current_lap}")
            for v in snapshot.vehicles:
                print(f"      {v.vehicle_id}: {v.position_m:7.1f} m, "
                      f"{v.compound.value}/{v.tire_age} laps, {v.status.value}")

    # Step 3: Results
    print("\n3. Results:")
    result = RaceResult.from_snapshot(snapshot, config.track.lap_count)
    print(result.format_tables())

    for pos, v in enumerate(result.finishing_order(), start=1):
        print(f"   P{pos} {v.vehicle_id}: {v.total_time_s:.3f}s, "
              f"best lap {v.best_lap_time_s:.3f}s, {v.pit_stops} stop(s)")

    print("\n" + "=" * 60)
    print(f"Simulation complete after {controller.tick_count} ticks!")
    print("=" * 60)


if __name__ == "__main__":
    main()
