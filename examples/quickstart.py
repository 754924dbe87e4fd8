"""orbwatch Quickstart: parse a TLE and inspect where it is right now."""

from datetime import datetime, timezone

from orbwatch import OrbitalRecord, classify_freshness, derive_orbital_elements, propagate

# ISS (ZARYA) TLE
line1 = "1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9997"
line2 = "2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439592"

# Parse it
iss = OrbitalRecord.from_lines(line1, line2, name="ISS (ZARYA)")
elements = derive_orbital_elements(iss)
now = datetime.now(timezone.utc)

print(f"Satellite: {iss.name}")
print(f"NORAD ID:  {iss.norad_id}")
print(f"Epoch:     {iss.epoch} ({classify_freshness(iss.epoch, now).value})")
print(f"Incl:      {elements.inclination_deg:.4f}°")
print(f"Ecc:       {elements.eccentricity:.7f}")
print(f"Period:    {elements.period_min:.1f} min")

# Old element sets are still propagated, just less accurately
result = propagate(iss, now)
if result is None:
    print("Propagation failed (orbit decayed?)")
else:
    pos = result.position
    print(f"Position:  {pos.latitude:.3f}, {pos.longitude:.3f} at {pos.altitude:.1f} km")
    print(f"Speed:     {result.velocity.speed:.2f} km/s")
