"""Tests for duration probing, chunk planning and chunk extraction."""

import os
import subprocess
import pytest
from unittest.mock import patch

from exceptions import ChunkExtractionError, DurationProbeError
from services.ffmpeg_command_builder import FFmpegCommandBuilder
from transcription.audio_processor import ChunkPlanner, plan_chunk_ranges
from transcription.models import ChunkSpec


def _completed(stdout=""):
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr="")


@pytest.mark.unit
class TestPlanChunkRanges:
    """Test the pure range computation."""

    def test_long_lecture(self):
        assert plan_chunk_ranges(1500, 600, 2) == [
            (0.0, 600.0),
            (598.0, 1198.0),
            (1196.0, 1500.0),
        ]

    def test_shorter_than_window(self):
        assert plan_chunk_ranges(300, 600, 2) == [(0.0, 300.0)]

    def test_exactly_one_window(self):
        assert plan_chunk_ranges(600, 600, 2) == [(0.0, 600.0)]

    def test_zero_duration(self):
        assert plan_chunk_ranges(0, 600, 2) == []

    def test_no_overlap(self):
        assert plan_chunk_ranges(25, 10, 0) == [(0.0, 10.0), (10.0, 20.0), (20.0, 25.0)]

    @pytest.mark.parametrize("duration,window,overlap", [
        (1500, 600, 2),
        (3600.5, 600, 2),
        (61, 10, 9.5),
        (1, 0.3, 0.1),
    ])
    def test_ranges_cover_whole_duration(self, duration, window, overlap):
        ranges = plan_chunk_ranges(duration, window, overlap)

        assert ranges[0][0] == 0
        assert ranges[-1][1] == duration
        for start, end in ranges:
            assert end - start <= window
        for (_, prev_end), (next_start, _) in zip(ranges, ranges[1:]):
            assert next_start == pytest.approx(prev_end - overlap)

    def test_terminates_when_last_chunk_reaches_end(self):
        # The final range ends at the duration; no trailing overlap-only chunk
        ranges = plan_chunk_ranges(1198, 600, 2)
        assert ranges == [(0.0, 600.0), (598.0, 1198.0)]

    @pytest.mark.parametrize("window,overlap", [
        (0, 0),
        (-10, 2),
        (600, -1),
        (600, 600),
        (10, 12),
    ])
    def test_invalid_parameters(self, window, overlap):
        with pytest.raises(ValueError):
            plan_chunk_ranges(1500, window, overlap)


@pytest.mark.unit
class TestChunkPlannerDuration:
    """Test ffprobe duration probing."""

    @patch('transcription.audio_processor.subprocess.run')
    def test_get_duration(self, mock_run):
        mock_run.return_value = _completed("1500.250000\n")
        planner = ChunkPlanner(FFmpegCommandBuilder(ffprobe_command='ffprobe'))

        assert planner.get_duration_seconds('lecture.mp3') == 1500.25
        cmd = mock_run.call_args[0][0]
        assert cmd[0] == 'ffprobe'
        assert cmd[-1] == 'lecture.mp3'
        assert mock_run.call_args[1]['check'] is True

    @patch('transcription.audio_processor.subprocess.run')
    def test_probe_failure(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ['ffprobe'], stderr="lecture.mp3: Invalid data found when processing input"
        )

        with pytest.raises(DurationProbeError) as exc_info:
            ChunkPlanner().get_duration_seconds('lecture.mp3')

        assert "Could not determine duration of: lecture.mp3" in str(exc_info.value)
        assert "Invalid data" in exc_info.value.details

    @patch('transcription.audio_processor.subprocess.run')
    @pytest.mark.parametrize("output", ["N/A", "", "nan", "-3"])
    def test_unusable_output(self, mock_run, output):
        mock_run.return_value = _completed(output)

        with pytest.raises(DurationProbeError) as exc_info:
            ChunkPlanner().get_duration_seconds('lecture.mp3')

        assert "Unexpected ffprobe output" in exc_info.value.details

    @patch('transcription.audio_processor.subprocess.run')
    def test_ffprobe_missing(self, mock_run):
        mock_run.side_effect = FileNotFoundError("ffprobe")

        with pytest.raises(DurationProbeError):
            ChunkPlanner().get_duration_seconds('lecture.mp3')


@pytest.mark.unit
class TestChunkPlannerMakeChunks:
    """Test chunk extraction."""

    @patch('transcription.audio_processor.subprocess.run')
    def test_make_chunks(self, mock_run, tmp_path):
        mock_run.side_effect = [_completed("1500"), _completed(), _completed(), _completed()]
        planner = ChunkPlanner(FFmpegCommandBuilder(ffmpeg_command='ffmpeg', ffprobe_command='ffprobe'))

        chunks = planner.make_chunks('/audio/lecture.mp3', 600, 2, output_dir=str(tmp_path))

        assert chunks == [
            ChunkSpec(path=str(tmp_path / "chunk-0.mp3"), start=0.0, end=600.0, index=0),
            ChunkSpec(path=str(tmp_path / "chunk-1.mp3"), start=598.0, end=1198.0, index=1),
            ChunkSpec(path=str(tmp_path / "chunk-2.mp3"), start=1196.0, end=1500.0, index=2),
        ]

        extract_calls = [call[0][0] for call in mock_run.call_args_list[1:]]
        assert extract_calls[0] == [
            'ffmpeg', '-hide_banner', '-ss', '0', '-t', '602',
            '-i', '/audio/lecture.mp3', '-c', 'copy', str(tmp_path / "chunk-0.mp3")
        ]
        assert extract_calls[1][3:6] == ['598', '-t', '602']
        assert extract_calls[2][3:6] == ['1196', '-t', '306']

    @patch('transcription.audio_processor.subprocess.run')
    def test_chunk_extension_follows_source(self, mock_run, tmp_path):
        mock_run.side_effect = [_completed("30"), _completed()]

        chunks = ChunkPlanner().make_chunks('/audio/lecture.m4a', 600, 2, output_dir=str(tmp_path))

        assert chunks[0].path.endswith("chunk-0.m4a")

    @patch('transcription.audio_processor.subprocess.run')
    def test_chunk_extension_defaults_to_mp3(self, mock_run, tmp_path):
        mock_run.side_effect = [_completed("30"), _completed()]

        chunks = ChunkPlanner().make_chunks('/audio/recording', 600, 2, output_dir=str(tmp_path))

        assert chunks[0].path.endswith("chunk-0.mp3")

    @patch('transcription.audio_processor.subprocess.run')
    def test_zero_length_audio(self, mock_run, tmp_path):
        mock_run.return_value = _completed("0.0")

        assert ChunkPlanner().make_chunks('lecture.mp3', output_dir=str(tmp_path)) == []
        assert mock_run.call_count == 1

    @patch('transcription.audio_processor.subprocess.run')
    def test_extraction_failure(self, mock_run, tmp_path):
        mock_run.side_effect = [
            _completed("1500"),
            _completed(),
            subprocess.CalledProcessError(1, ['ffmpeg'], stderr="Conversion failed!"),
        ]

        with pytest.raises(ChunkExtractionError) as exc_info:
            ChunkPlanner().make_chunks('lecture.mp3', 600, 2, output_dir=str(tmp_path))

        assert exc_info.value.chunk_index == 1
        assert "Conversion failed!" in exc_info.value.details
        assert mock_run.call_count == 3

    @patch('transcription.audio_processor.subprocess.run')
    def test_creates_temp_directory_when_not_given(self, mock_run):
        mock_run.side_effect = [_completed("10"), _completed()]
        planner = ChunkPlanner()

        chunks = planner.make_chunks('lecture.mp3', 600, 2)
        try:
            chunk_dir = os.path.dirname(chunks[0].path)
            assert os.path.basename(chunk_dir).startswith("chunks-")
            assert os.path.isdir(chunk_dir)
        finally:
            planner.cleanup_chunks(chunks)

        assert not os.path.exists(chunk_dir)


@pytest.mark.unit
class TestChunkPlannerCleanup:
    """Test chunk directory removal."""

    def test_cleanup_removes_directory(self, sample_chunks):
        chunk_dir = os.path.dirname(sample_chunks[0].path)

        ChunkPlanner().cleanup_chunks(sample_chunks)

        assert not os.path.exists(chunk_dir)

    def test_cleanup_empty_list(self):
        ChunkPlanner().cleanup_chunks([])

    def test_cleanup_missing_directory(self, tmp_path):
        chunk = ChunkSpec(path=str(tmp_path / "gone" / "chunk-0.mp3"), start=0, end=1, index=0)
        ChunkPlanner().cleanup_chunks([chunk])

    @patch('resource_managers.shutil.rmtree')
    def test_cleanup_error_is_not_raised(self, mock_rmtree, sample_chunks):
        mock_rmtree.side_effect = PermissionError("denied")
        ChunkPlanner().cleanup_chunks(sample_chunks)
        mock_rmtree.assert_called_once()
