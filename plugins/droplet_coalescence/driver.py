"""
Simulation Driver

Runs a DropletSimulator continuously on a background thread and exposes
start / stop / reset / clear controls to the viewer or any other host.

Each loop iteration ticks the simulator, hands a snapshot of the new
field to the render callback, then waits out the rest of the frame
interval. Waiting happens on the loop's cancel event, so stopping takes
effect at the next tick boundary without interrupting a step.

At most one loop is ever alive: starting (and therefore reset and clear)
cancels and joins the previous loop before launching a new one.

Control calls made from inside the render callback (which runs on the
loop thread) are applied asynchronously on a helper thread.
"""

import threading
import time

STOPPED = "stopped"
RUNNING = "running"


class _StepLoop(threading.Thread):
    """One run of the stepping loop; never restarted once cancelled."""

    def __init__(self, driver, target_fps):
        super().__init__(daemon=True, name="droplet-step-loop")
        self.driver = driver
        self.interval = 1.0 / target_fps
        self.cancelled = threading.Event()

    def run(self):
        while not self.cancelled.is_set():
            start = time.perf_counter()
            try:
                self.driver.tick()
            except Exception as e:
                print(f"[Droplets] Step loop error: {e}")
                self.driver._loop_failed(self, e)
                return
            elapsed = time.perf_counter() - start
            # Cancellation is checked here, before the next tick is scheduled
            self.cancelled.wait(max(0.0, self.interval - elapsed))

    def cancel(self):
        self.cancelled.set()


class Driver:
    """Stopped/running state machine around a DropletSimulator.

    Args:
        simulator: DropletSimulator to advance
        on_render: Optional callback receiving a field snapshot after
            every completed tick (and after a clear)
        target_fps: Tick cadence of the background loop
    """

    def __init__(self, simulator, on_render=None, target_fps=60):
        if not target_fps > 0:
            raise ValueError(f"target_fps must be positive, got {target_fps}")
        self.simulator = simulator
        self.on_render = on_render
        self.target_fps = target_fps
        self.state = STOPPED
        self.last_error = None
        self._loop = None
        self._control_lock = threading.RLock()
        self._frame_lock = threading.Lock()
        self._latest_frame = None

    @property
    def running(self):
        return self.state == RUNNING

    @property
    def latest_frame(self):
        """Most recent rendered field snapshot, or None before the first."""
        with self._frame_lock:
            return self._latest_frame

    def start(self):
        """Enter running, replacing any outstanding loop."""
        if self._deferred(self.start):
            return
        with self._control_lock:
            self._cancel_loop()
            self.last_error = None
            self._loop = _StepLoop(self, self.target_fps)
            self.state = RUNNING
            self._loop.start()
        print("[Droplets] Simulation loop started")

    def stop(self):
        """Enter stopped; an in-flight tick is allowed to finish."""
        if self._deferred(self.stop):
            return
        with self._control_lock:
            was_running = self._loop is not None
            self._cancel_loop()
            self.state = STOPPED
        if was_running:
            print("[Droplets] Simulation loop stopped")

    def initialize(self):
        """Re-seed droplets from the live params, then run."""
        if self._deferred(self.initialize):
            return
        with self._control_lock:
            self.stop()
            self.simulator.initialize()
            self.render()
            self.start()

    reset = initialize

    def clear(self):
        """Empty the field, render it, then resume running."""
        if self._deferred(self.clear):
            return
        with self._control_lock:
            self.stop()
            self.simulator.clear()
            self.render()
            self.start()

    def tick(self):
        """Advance one step and render it. Usable while stopped."""
        self.simulator.tick()
        self.render()

    def render(self):
        frame = self.simulator.snapshot()
        with self._frame_lock:
            self._latest_frame = frame
        if self.on_render is not None:
            self.on_render(frame)

    def add_droplet(self, x, y, radius=None):
        """Stamp onto the live field between ticks. Returns the booked mass."""
        return self.simulator.add_droplet(x, y, radius)

    def add_random_droplet(self, radius=None):
        return self.simulator.add_random_droplet(radius)

    def _cancel_loop(self):
        loop, self._loop = self._loop, None
        if loop is None:
            return
        loop.cancel()
        # Never called on a loop thread (see _deferred), so joining under
        # the control lock cannot wait on a thread that wants the lock.
        loop.join()

    def _deferred(self, action):
        """Hand a control call made from the loop thread to a helper thread.

        A render callback runs on the loop thread. If it took the control
        lock, a stop() in another thread holding that lock while joining
        the loop would never return. Instead the call is replayed on a
        short-lived daemon thread once the lock is free; the loop finishes
        its iteration meanwhile. Returns True when the call was deferred.
        """
        current = threading.current_thread()
        if not (isinstance(current, _StepLoop) and current.driver is self):
            return False
        threading.Thread(target=action, daemon=True, name="droplet-control").start()
        return True

    def _loop_failed(self, loop, error):
        # Runs on the loop thread; stop() may be holding the control lock
        # while it joins this thread, so only plain attribute writes here.
        self.last_error = error
        if self._loop is loop:
            self._loop = None
            self.state = STOPPED
