from .fake_publisher import FakePublisher, FailingNotifier

__all__ = ["FakePublisher", "FailingNotifier"]
