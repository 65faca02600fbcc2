"""
Tests for the page-loading overlay (vetshop.ui.loading).
"""

from vetshop.ui.loading import FrameScheduler, LoadingContext, PageLoader, TransitionLink


class TestFrameScheduler:
    def test_runs_in_request_order(self):
        scheduler = FrameScheduler()
        seen = []
        scheduler.request_frame(lambda: seen.append(1))
        scheduler.request_frame(lambda: seen.append(2))
        assert scheduler.tick() == 2
        assert seen == [1, 2]
        assert scheduler.pending == 0

    def test_callbacks_requested_during_tick_wait(self):
        scheduler = FrameScheduler()
        seen = []
        scheduler.request_frame(lambda: scheduler.request_frame(lambda: seen.append("later")))
        scheduler.tick()
        assert seen == []
        scheduler.tick()
        assert seen == ["later"]

    def test_cancel(self):
        scheduler = FrameScheduler()
        seen = []
        handle = scheduler.request_frame(lambda: seen.append(1))
        scheduler.cancel(handle)
        scheduler.tick()
        assert seen == []


class TestLoadingContext:
    def test_show_takes_effect_next_frame(self):
        ctx = LoadingContext()
        ctx.show_loader()
        assert ctx.is_loading is False
        ctx.scheduler.tick()
        assert ctx.is_loading is True

    def test_hide_takes_effect_next_frame(self):
        ctx = LoadingContext()
        ctx.show_loader()
        ctx.scheduler.tick()
        ctx.hide_loader()
        assert ctx.is_loading is True
        ctx.scheduler.tick()
        assert ctx.is_loading is False

    def test_hide_wins_over_earlier_show(self):
        ctx = LoadingContext()
        ctx.show_loader()
        ctx.hide_loader()
        ctx.scheduler.tick()
        assert ctx.is_loading is False

    def test_show_after_hide_wins(self):
        ctx = LoadingContext()
        ctx.hide_loader()
        ctx.show_loader()
        ctx.scheduler.tick()
        assert ctx.is_loading is True

    def test_contexts_are_independent(self):
        a, b = LoadingContext(), LoadingContext()
        a.show_loader()
        a.scheduler.tick()
        b.scheduler.tick()
        assert a.is_loading and not b.is_loading


class TestPageLoader:
    def test_route_change_hides_regardless_of_prior_calls(self):
        ctx = LoadingContext()
        loader = PageLoader(ctx)
        loader.on_route("/tienda")
        ctx.show_loader()
        ctx.scheduler.tick()
        ctx.show_loader()
        loader.on_route("/cuenta/pedidos")
        ctx.scheduler.tick()
        assert loader.visible is False

    def test_same_route_does_not_hide(self):
        ctx = LoadingContext()
        loader = PageLoader(ctx)
        loader.on_route("/tienda")
        ctx.scheduler.tick()
        ctx.show_loader()
        loader.on_route("/tienda")
        ctx.scheduler.tick()
        assert loader.visible is True


class TestTransitionLink:
    def test_click_to_other_route_shows_loader(self):
        ctx = LoadingContext()
        link = TransitionLink("/cuenta/pedidos", ctx)
        assert link.click("/tienda") == "/cuenta/pedidos"
        ctx.scheduler.tick()
        assert ctx.is_loading is True

    def test_click_to_current_route_does_nothing(self):
        ctx = LoadingContext()
        link = TransitionLink("/tienda", ctx)
        assert link.click("/tienda") == "/tienda"
        assert ctx.scheduler.pending == 0
