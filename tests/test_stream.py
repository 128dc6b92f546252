"""Tests for keep-only-latest frame delivery."""

from conftest import FakeFrame
from qr_code_reader.errors import InvalidRotation
from qr_code_reader.stream import AnalysisStream


class RecordingAnalyzer:
    def __init__(self, error=None):
        self.frames = []
        self.error = error

    def analyze(self, frame):
        self.frames.append(frame)
        try:
            if self.error is not None:
                raise self.error
        finally:
            frame.release()


class TestAnalysisStream:

    def test_single_frame_is_analyzed(self, executor):
        analyzer = RecordingAnalyzer()
        stream = AnalysisStream(analyzer, executor)
        frame = FakeFrame()

        stream.deliver(frame)
        executor.run_all()

        assert analyzer.frames == [frame]
        assert frame.release_calls == 1

    def test_busy_worker_keeps_only_latest(self, executor):
        analyzer = RecordingAnalyzer()
        stream = AnalysisStream(analyzer, executor)
        frames = [FakeFrame() for _ in range(3)]

        for frame in frames:
            stream.deliver(frame)
        executor.run_all()

        assert analyzer.frames == [frames[-1]]
        assert [frame.release_calls for frame in frames] == [1, 1, 1]
        assert stream.dropped_frames == 2

    def test_only_one_drain_job_is_scheduled(self, executor):
        stream = AnalysisStream(RecordingAnalyzer(), executor)
        stream.deliver(FakeFrame())
        stream.deliver(FakeFrame())
        assert len(executor.jobs) == 1

    def test_frames_after_drain_are_analyzed_in_order(self, executor):
        analyzer = RecordingAnalyzer()
        stream = AnalysisStream(analyzer, executor)
        first, second = FakeFrame(), FakeFrame()

        stream.deliver(first)
        executor.run_all()
        stream.deliver(second)
        executor.run_all()

        assert analyzer.frames == [first, second]

    def test_frame_arriving_during_analysis_is_picked_up(self, executor):
        late = FakeFrame()

        class DeliveringAnalyzer(RecordingAnalyzer):
            def analyze(self, frame):
                super().analyze(frame)
                if len(self.frames) == 1:
                    stream.deliver(late)

        analyzer = DeliveringAnalyzer()
        stream = AnalysisStream(analyzer, executor)
        early = FakeFrame()
        stream.deliver(early)
        executor.run_all()

        assert analyzer.frames == [early, late]

    def test_analyzer_errors_do_not_stop_the_stream(self, executor, caplog):
        analyzer = RecordingAnalyzer(error=InvalidRotation(45))
        stream = AnalysisStream(analyzer, executor)

        stream.deliver(FakeFrame())
        executor.run_all()
        analyzer.error = None
        frame = FakeFrame()
        stream.deliver(frame)
        executor.run_all()

        assert analyzer.frames[-1] is frame
        assert "Frame analysis failed" in caplog.text

    def test_close_releases_pending_frame(self, executor):
        analyzer = RecordingAnalyzer()
        stream = AnalysisStream(analyzer, executor)
        frame = FakeFrame()

        stream.deliver(frame)
        stream.close()
        executor.run_all()

        assert analyzer.frames == []
        assert frame.release_calls == 1

    def test_delivery_after_close_releases_immediately(self, executor):
        stream = AnalysisStream(RecordingAnalyzer(), executor)
        stream.close()
        frame = FakeFrame()

        stream.deliver(frame)

        assert frame.release_calls == 1
        assert executor.jobs == []

    def test_delivery_after_executor_shutdown_releases_frame(self, executor):
        stream = AnalysisStream(RecordingAnalyzer(), executor)
        executor.shutdown()
        frame = FakeFrame()

        stream.deliver(frame)

        assert frame.release_calls == 1
        assert stream.closed
