# node_sim.py
# Synthetic sensor node: produces one Readings per cycle, encodes it and
# posts the raw record to the decode endpoint.

from __future__ import annotations

import asyncio
import logging
import math
import random
from datetime import datetime, timedelta, timezone

import httpx

from ..config import load_settings
from ..record import Readings, encode_record, to_hex

logger = logging.getLogger(__name__)

# Clear-sky irradiance at solar noon, W/m2
PEAK_IRRADIANCE = 900.0


def _lp(prev: float, target: float, alpha: float) -> float:
    """One-pole low-pass filter (alpha in (0,1])."""
    return (1 - alpha) * prev + alpha * target


def _daylight(hour: float) -> float:
    """0..1 sun elevation proxy, zero between 18:00 and 06:00."""
    if hour < 6.0 or hour >= 18.0:
        return 0.0
    return math.sin(math.pi * (hour - 6.0) / 12.0)


class NodeSim:
    """
    Generate Readings with slow diurnal dynamics. Call next_readings(dt)
    with increasing datetimes. Each optional sensor drops out with
    ``dropout`` probability so every bitmap combination shows up.
    """

    def __init__(
        self,
        period_minutes: int = 6,
        start_battery_v: float = 3.9,
        seed: int | None = None,
        dropout: float = 0.05,
        with_probe: bool = True,
    ):
        self.period_minutes = int(period_minutes)
        self.rng = random.Random(seed if seed is not None else random.randrange(1 << 30))
        self.dropout = dropout
        self.with_probe = with_probe
        self.boot = self.rng.randint(0, 255)
        self.battery_v = float(start_battery_v)
        self.temp_c = self.rng.uniform(14, 22)
        self.rh_pct = self.rng.uniform(40, 70)
        self.probe_c = self.temp_c - 1.5
        self.last_time: datetime | None = None

    def _present(self) -> bool:
        return self.rng.random() >= self.dropout

    def reboot(self) -> None:
        self.boot = (self.boot + 1) % 256

    def next_readings(self, dt: datetime) -> Readings:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        hour = dt.hour + dt.minute / 60.0
        sun = _daylight(hour)

        if self.last_time is not None:
            minutes = max(0.0, (dt - self.last_time).total_seconds() / 60.0)
            # ~20 mV/day drain, floor at brown-out
            self.battery_v = max(3.3, self.battery_v - 0.02 * minutes / 1440.0)
        self.last_time = dt

        temp_target = 12.0 + 10.0 * sun + self.rng.gauss(0, 0.3)
        self.temp_c = _lp(self.temp_c, temp_target, 0.2)
        rh_target = 85.0 - 35.0 * sun + self.rng.gauss(0, 1.5)
        self.rh_pct = max(0.0, min(100.0, _lp(self.rh_pct, rh_target, 0.2)))
        self.probe_c = _lp(self.probe_c, self.temp_c - 1.5, 0.1)

        light = PEAK_IRRADIANCE * sun * self.rng.uniform(0.3, 1.0)
        usb = self.rng.random() < 0.1

        return Readings(
            battery_v=round(self.battery_v, 3),
            system_v=3.3 if self._present() else None,
            boot=self.boot,
            temp_c=self.temp_c if self._present() else None,
            rh_pct=self.rh_pct,
            light_wm2=light if self._present() else None,
            bus_v=5.0 if usb else None,
            probe_temp_c=self.probe_c if self.with_probe and self._present() else None,
        )

    def generate_window(self, start: datetime, hours: float) -> list[tuple[datetime, Readings]]:
        steps = int(hours * 60 // self.period_minutes)
        out = []
        for i in range(steps):
            dt = start + timedelta(minutes=i * self.period_minutes)
            out.append((dt, self.next_readings(dt)))
        return out


def _should_retry_status(status: int) -> bool:
    return status == 429 or 500 <= status <= 599


async def post_record(
    client: httpx.AsyncClient,
    payload: bytes,
    port: int,
    max_retries: int = 3,
    backoff: float = 0.25,
) -> dict | None:
    """POST one raw record; return the decoded JSON, or None once retries are spent."""
    headers = {"Content-Type": "application/octet-stream", "X-Port": str(port)}
    for attempt in range(max_retries + 1):
        try:
            r = await client.post("/api/uplinks/decode/raw", content=payload, headers=headers)
            if r.status_code < 300:
                return r.json()
            if _should_retry_status(r.status_code) and attempt < max_retries:
                await asyncio.sleep(backoff * (2 ** attempt))
                continue
            logger.warning("decode HTTP %d for %s: %s", r.status_code, to_hex(payload), r.text[:200])
            return None
        except (httpx.ReadTimeout, httpx.ConnectTimeout, httpx.RemoteProtocolError, httpx.ConnectError) as e:
            if attempt < max_retries:
                await asyncio.sleep(backoff * (2 ** attempt))
                continue
            logger.warning("decode network error: %r", e)
            return None
    return None


async def run(hours: float = 12.0, seed: int | None = 123) -> None:
    settings = load_settings()
    sim = NodeSim(seed=seed)
    start = datetime.now(timezone.utc).replace(hour=5, minute=0, second=0, microsecond=0)
    async with httpx.AsyncClient(base_url=settings.backend_base, timeout=10) as client:
        for dt, readings in sim.generate_window(start, hours):
            payload = encode_record(readings)
            decoded = await post_record(client, payload, settings.port)
            logger.info("%s %s -> %s", dt.strftime("%H:%M"), to_hex(payload), decoded)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())
