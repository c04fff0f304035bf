from kvharness import time


class PeriodicWaiter:
    def __init__(self, poll_interval, poll_timeout, clock=time.Clock):
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.clock = clock

    def wait(self, poll_function, *poll_function_args, **poll_function_kwargs):
        """
        Calls ``poll_function`` every ``poll_interval`` seconds until it returns a truthy value.

        :raises TimeoutError: if ``poll_function`` did not succeed within ``poll_timeout`` seconds.
        """
        stop_watch = self.clock.stop_watch()
        stop_watch.start()

        while stop_watch.split_time() < self.poll_timeout:
            if poll_function(*poll_function_args, **poll_function_kwargs):
                return
            time.sleep(self.poll_interval)

        raise TimeoutError
