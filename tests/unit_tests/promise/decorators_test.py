# -*- coding: utf-8 -*-

from eventual.promise import ManualScheduler, Promise, wrap_promise


class TestDecorator(object):

    def test_wrap_sync_function(self, scheduler, observe):
        @wrap_promise
        def f(x):
            return x * 3

        p = f(30)
        assert isinstance(p, Promise)
        outcomes = observe(p)
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 90)]

    def test_wrap_function_returning_promise(self, scheduler, observe):
        @wrap_promise
        def f(x):
            return Promise.resolve(x + 10)

        p = f(30)
        assert isinstance(p, Promise)
        outcomes = observe(p)
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 40)]

    def test_wrap_function_with_exception(self, scheduler, observe):
        class MyException(Exception):
            pass

        error = MyException()

        @wrap_promise
        def f(x):
            raise error

        p = f(30)
        assert isinstance(p, Promise)
        outcomes = observe(p)
        scheduler.run_until_idle()
        assert outcomes == [('rejected', error)]

    def test_wrap_keeps_function_name(self):
        @wrap_promise
        def my_function():
            """Documentation."""

        assert my_function.__name__ == 'my_function'
        assert my_function.__doc__ == 'Documentation.'

    def test_wrap_with_scheduler(self, scheduler):
        other_scheduler = ManualScheduler()

        @wrap_promise(scheduler=other_scheduler)
        def f(x):
            return x - 1

        @wrap_promise(scheduler=other_scheduler)
        def g():
            raise ValueError()

        assert f(3).scheduler is other_scheduler
        assert g().scheduler is other_scheduler

        calls = []
        f(3).then(calls.append)
        scheduler.run_until_idle()
        assert calls == []
        other_scheduler.run_until_idle()
        assert calls == [2]
