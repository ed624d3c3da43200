import asyncio
import logging
import os
import sys
import time
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from junction.domain.config import load_config
from junction.kernel.simulation_kernel import SimulationKernel
from junction.kernel.commands import DrainQueuesCommand, IngestFeedCommand
from junction.domain.models import (
    FeedBatch, FeedResult, IntersectionSnapshot, SpawnRequest, SpawnResult, StatisticsView
)

logging.basicConfig(
    level=os.environ.get("JUNCTION_LOG_LEVEL", "INFO"),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Initialize Kernel
kernel = SimulationKernel(load_config(os.environ.get("JUNCTION_CONFIG")))

# Background task for simulation loop
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Start the simulation loop
    kernel.initialize()
    loop_task = asyncio.create_task(run_simulation())
    yield
    # Shutdown
    loop_task.cancel()
    try:
        await loop_task
    except asyncio.CancelledError:
        pass
    kernel.shutdown()

app = FastAPI(lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

async def run_simulation():
    """Runs the simulation update loop at one tick per configured dt"""
    dt = kernel.dt
    started = time.monotonic()

    while True:
        start_time = time.time()

        # Ticks run to completion between requests on the event loop thread.
        # The controller and vehicles-per-minute follow wall-clock time here.
        kernel.run_tick(now=time.monotonic() - started)

        # Sleep to maintain frame rate
        elapsed = time.time() - start_time
        sleep_time = max(0.0, dt - elapsed)
        await asyncio.sleep(sleep_time)

@app.get("/api/intersection/state", response_model=IntersectionSnapshot)
async def get_intersection_state():
    """Returns the snapshot published at the last tick boundary"""
    return kernel.snapshot()

@app.get("/api/intersection/stats", response_model=StatisticsView)
async def get_statistics():
    """Returns throughput statistics"""
    return kernel.snapshot().stats

@app.post("/api/vehicles/spawn", response_model=SpawnResult)
async def spawn_vehicle(request: SpawnRequest):
    """Queues a vehicle on an approach; 429 when that approach's queue is full"""
    result = kernel.request_spawn(request.direction, request.type)
    if not result.accepted:
        raise HTTPException(status_code=429, detail=f"{request.direction.value} queue full")
    return result

@app.post("/api/feed", response_model=FeedResult)
async def ingest_feed(batch: FeedBatch):
    """Applies a batch of lane feed records; malformed lines are skipped"""
    return IngestFeedCommand(batch.lines).execute(kernel)

@app.post("/api/queues/drain")
async def drain_queues():
    """Discards every waiting vehicle at the start of the next tick"""
    kernel.queue_command(DrainQueuesCommand())
    return {"status": "queued"}

@app.get("/")
def read_root():
    return {"status": "Junction intersection simulation running", "tick": kernel.state.tick_id}
