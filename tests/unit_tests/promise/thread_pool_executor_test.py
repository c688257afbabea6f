# -*- coding: utf-8 -*-

import threading

from eventual.promise import ThreadPoolExecutor, ThreadScheduler


class TestThreadPoolExecutor(object):

    def _wait_outcome(self, promise):
        done = threading.Event()
        outcomes = []

        def on_result(value):
            outcomes.append(('fulfilled', value))
            done.set()

        def on_error(reason):
            outcomes.append(('rejected', reason))
            done.set()

        promise.then(on_result, on_error)
        assert done.wait(1)
        return outcomes[0]

    def test_small_task(self):
        with ThreadScheduler() as scheduler:
            with ThreadPoolExecutor(1, scheduler=scheduler) as executor:
                def task(arg):
                    return 'OK %s' % arg

                p = executor.submit(task, 'ARG')
                assert self._wait_outcome(p) == ('fulfilled', 'OK ARG')

    def test_task_failure(self):
        class MyException(Exception):
            pass

        with ThreadScheduler() as scheduler:
            with ThreadPoolExecutor(1, scheduler=scheduler) as executor:
                def task(arg):
                    raise MyException

                p = executor.submit(task, 'ARG')
                state, reason = self._wait_outcome(p)
                assert state == 'rejected'
                assert isinstance(reason, MyException)

    def test_task_keyword_arguments(self):
        with ThreadScheduler() as scheduler:
            with ThreadPoolExecutor(2, scheduler=scheduler) as executor:
                p = executor.submit(sorted, [3, 1, 2], reverse=True)
                assert self._wait_outcome(p) == ('fulfilled', [3, 2, 1])
