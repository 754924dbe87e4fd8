"""orbwatch Live Tracking: keep a catalog refreshed and follow one object.

Fetches the catalog document (falling back to the local cache or the
built-in sample set when offline), refreshes every position on a timer
and prints the selected object's ground track.
"""

import logging
import time

from orbwatch import Category, TrackerSettings, TrackingSession

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

settings = TrackerSettings.from_env()

with TrackingSession(settings) as session:
    if not session.load():
        raise SystemExit(f"Could not load satellites: {session.error}")

    session.toggle_filter(Category.NAVIGATION)
    for obj in session.visible_objects:
        print(f"{obj.norad_id:>6} {obj.name:<24} {obj.category.label:<15} {obj.freshness().value}")

    track = session.select(25544)
    if track is not None:
        print(f"Ground track: {len(track.points)} points in {len(track.segments)} segment(s)")

    session.start()
    for _ in range(3):
        time.sleep(settings.update_interval_s)
        iss = session.selected_object
        if iss is not None:
            pos = iss.position
            print(f"{pos.timestamp:%H:%M:%S} {pos.latitude:8.3f} {pos.longitude:9.3f} {pos.altitude:7.1f} km")
