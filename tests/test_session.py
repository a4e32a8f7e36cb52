"""
Tests for guided recitation sessions: sequential and best-match policies,
error handling and the injected transcript source.

Uses ReplayTranscriptSource; no recognizer or audio required.
Run: python3 -m unittest tests.test_session -v
"""

import unittest

from streaming.errors import RecognitionError, UnsupportedCapabilityError
from streaming.session import (
    BestMatchPolicy,
    RecitationSession,
    SequentialPolicy,
    make_policy,
)
from streaming.transcript_source import ReplayTranscriptSource, TranscriptUpdate
from tests.sample_data import FATIHA, sample_corpus


def final(text):
    return TranscriptUpdate(text=text, is_final=True)


def interim(text):
    return TranscriptUpdate(text=text, is_final=False)


class TestTranscriptState(unittest.TestCase):
    def setUp(self):
        self.session = RecitationSession(sample_corpus().get_surah(1))

    def test_final_segments_accumulate(self):
        self.session.ingest(final("بسم الله"))
        self.session.ingest(final("الرحمن الرحيم"))
        self.assertEqual(self.session.committed, "بسم الله الرحمن الرحيم")
        self.assertEqual(self.session.interim, "")

    def test_interim_replaced(self):
        self.session.ingest(interim("بسم"))
        self.session.ingest(interim("بسم الله"))
        self.assertEqual(self.session.interim, "بسم الله")

    def test_committed_preferred_over_interim(self):
        self.session.ingest(final("بسم الله"))
        text = self.session.ingest(interim("الرحمن"))
        self.assertEqual(text, "بسم الله")

    def test_short_text_not_evaluated(self):
        self.assertIsNone(self.session.ingest(interim("بس")))
        self.assertIsNone(self.session.handle_update(interim("بس")))
        self.assertIsNone(self.session.last_assessment)


class TestSequentialPolicy(unittest.TestCase):
    def setUp(self):
        self.verses = sample_corpus().get_surah(1)

    def test_detects_first_verse_and_pauses(self):
        session = RecitationSession(self.verses, policy=SequentialPolicy())
        assessment = session.handle_update(final(FATIHA[0]))
        self.assertTrue(assessment.detected)
        self.assertEqual(session.current_index, 0)
        self.assertTrue(session.paused)
        self.assertEqual(session.committed, "")
        self.assertEqual(session.results[0].accuracy, 100.0)

    def test_detection_threshold_is_inclusive(self):
        # one altered word out of four: 75
        session = RecitationSession(self.verses, policy=SequentialPolicy(detect_threshold=75.0))
        assessment = session.handle_update(final("بسم الله الرحمن الرحيم"))
        self.assertEqual(assessment.result.accuracy, 75.0)
        self.assertTrue(assessment.detected)

    def test_below_threshold_keeps_listening(self):
        session = RecitationSession(self.verses)
        assessment = session.handle_update(interim("بسم الله"))
        self.assertEqual(assessment.index, 0)
        self.assertEqual(assessment.result.accuracy, 50.0)
        self.assertFalse(assessment.detected)
        self.assertFalse(session.paused)
        self.assertEqual(session.current_candidate, 0)
        self.assertEqual(session.results, {})

    def test_only_next_verse_is_checked(self):
        session = RecitationSession(self.verses)
        # verse 2 recited first: compared against verse 1 only
        assessment = session.handle_update(final(FATIHA[1]))
        self.assertEqual(assessment.index, 0)
        self.assertFalse(assessment.detected)

    def test_updates_ignored_while_paused(self):
        session = RecitationSession(self.verses)
        session.handle_update(final(FATIHA[0]))
        self.assertIsNone(session.handle_update(final(FATIHA[1])))
        self.assertEqual(session.current_index, 0)

    def test_run_with_auto_resume(self):
        session = RecitationSession(self.verses)
        summary = session.run([final(FATIHA[0]), final(FATIHA[1]), final(FATIHA[2])], auto_resume=True)
        self.assertEqual(summary.current_index, 2)
        self.assertEqual(summary.completed_count, 3)
        self.assertEqual(summary.average_accuracy, 100.0)
        self.assertEqual(summary.texts[1], FATIHA[1])

    def test_whole_window_completes(self):
        session = RecitationSession(self.verses)
        summary = session.run([final(text) for text in FATIHA], auto_resume=True)
        self.assertTrue(summary.is_complete)
        # past the last verse there is nothing left to check
        self.assertIsNone(session.assess(FATIHA[0]))

    def test_end_of_stream_best_effort(self):
        session = RecitationSession(self.verses)
        summary = session.run([interim("بسم الله")])
        self.assertEqual(summary.results, {})
        self.assertEqual(summary.completed_count, 0)
        self.assertEqual(summary.last_assessment.result.accuracy, 50.0)
        self.assertEqual(summary.to_dict()["last_assessment"]["verse_key"], "1:1")


class TestBestMatchPolicy(unittest.TestCase):
    def setUp(self):
        self.verses = sample_corpus().get_surah(1)
        self.session = RecitationSession(self.verses, policy=BestMatchPolicy())

    def test_picks_best_verse_anywhere_in_window(self):
        assessment = self.session.handle_update(interim(FATIHA[3]))
        self.assertEqual(assessment.index, 3)
        self.assertTrue(assessment.detected)
        self.assertEqual(self.session.current_index, 3)
        self.assertFalse(self.session.paused)

    def test_tie_keeps_earliest_verse(self):
        # the basmala contains verse 3 verbatim: both score 100
        assessment = self.session.handle_update(interim(FATIHA[0]))
        self.assertEqual(assessment.index, 0)

    def test_nothing_above_floor(self):
        self.assertIsNone(self.session.handle_update(interim("xyz abc")))
        self.assertEqual(self.session.current_index, -1)

    def test_lower_score_does_not_overwrite(self):
        self.session.handle_update(interim(FATIHA[1]))
        assessment = self.session.handle_update(interim("الحمد لله رب"))
        self.assertEqual(assessment.index, 1)
        self.assertEqual(assessment.result.accuracy, 75.0)
        self.assertFalse(assessment.detected)
        self.assertEqual(self.session.results[1].accuracy, 100.0)

    def test_next_verse_may_overwrite_above_progression(self):
        self.session.handle_update(interim(FATIHA[1]))
        self.session.handle_update(interim("بسم الله الرحمن الرحيم"))
        self.assertEqual(self.session.current_index, 0)
        # verse 2 is next again; 50 is lower than its 100 but above 35
        assessment = self.session.handle_update(interim("الحمد لله"))
        self.assertEqual(assessment.index, 1)
        self.assertTrue(assessment.detected)
        self.assertEqual(self.session.results[1].accuracy, 50.0)
        self.assertEqual(self.session.current_index, 1)

    def test_final_segments_progress_through_window(self):
        # committed text keeps every earlier verse, which still scores 100
        detected = []
        for text in FATIHA[1:5]:
            assessment = self.session.handle_update(final(text))
            if assessment.detected:
                detected.append(assessment.index)
        self.assertEqual(detected, [1, 2, 3, 4])
        self.assertEqual(sorted(self.session.results), [1, 2, 3, 4])
        self.assertEqual(self.session.current_index, 4)

    def test_unrecorded_verse_wins_tie_over_recorded(self):
        self.session.handle_update(final(FATIHA[1]))
        # verse 3 skipped: verse 4 ties with the already recorded verse 2
        assessment = self.session.handle_update(final(FATIHA[3]))
        self.assertEqual(assessment.index, 3)
        self.assertTrue(assessment.detected)
        self.assertEqual(self.session.current_index, 3)

    def test_summary_statistics(self):
        self.session.handle_update(interim(FATIHA[1]))
        self.session.handle_update(interim("بسم الله الرحمن الرحيم"))
        summary = self.session.summary()
        self.assertEqual(summary.completed_count, 1)
        self.assertAlmostEqual(summary.average_accuracy, 87.5)
        self.assertFalse(summary.is_complete)


class TestMakePolicy(unittest.TestCase):
    def test_by_name(self):
        self.assertIsInstance(make_policy("sequential"), SequentialPolicy)
        policy = make_policy("best_match", floor=40.0)
        self.assertIsInstance(policy, BestMatchPolicy)
        self.assertEqual(policy.floor, 40.0)

    def test_unknown(self):
        with self.assertRaises(ValueError):
            make_policy("greedy")

    def test_verify_options_passed_through(self):
        policy = make_policy("sequential", word_metric="levenshtein")
        session = RecitationSession(sample_corpus().get_surah(1), policy=policy)
        assessment = session.handle_update(interim("بسم الله الرحمن الرحيم"))
        self.assertEqual(assessment.result.accuracy, 100.0)


class TestErrorsAndSource(unittest.TestCase):
    def setUp(self):
        self.verses = sample_corpus().get_surah(1)

    def test_start_without_source(self):
        session = RecitationSession(self.verses)
        with self.assertRaises(UnsupportedCapabilityError):
            session.start()

    def test_transient_errors_ignored(self):
        session = RecitationSession(self.verses)
        for code in ("no-speech", "aborted", "audio-capture", "network"):
            session.handle_error(RecognitionError(code))
        self.assertEqual(session.transient_error_count, 4)
        self.assertIsNone(session.failed)

    def test_fatal_error_discards_state_and_propagates(self):
        source = ReplayTranscriptSource([
            final(FATIHA[0]),
            RecognitionError("not-allowed"),
        ])
        session = RecitationSession(self.verses, source=source)
        session.start()
        # the first verse pauses the replay before the error is reached
        self.assertTrue(session.paused)
        with self.assertRaises(RecognitionError) as ctx:
            session.resume()
        self.assertEqual(ctx.exception.code, "not-allowed")
        self.assertTrue(ctx.exception.fatal)
        self.assertEqual(session.results, {})
        self.assertEqual(session.current_index, -1)
        self.assertIsNotNone(session.failed)
        self.assertIsNone(session.handle_update(final(FATIHA[0])))

    def test_reset_after_failure(self):
        session = RecitationSession(self.verses)
        with self.assertRaises(RecognitionError):
            session.handle_error(RecognitionError("service-not-allowed"))
        session.reset()
        self.assertIsNone(session.failed)
        self.assertTrue(session.handle_update(final(FATIHA[0])).detected)

    def test_source_stopped_on_detection_and_resumed(self):
        source = ReplayTranscriptSource([
            interim("بسم"),
            final(FATIHA[0]),
            final("some noise before the next verse"),
            RecognitionError("no-speech"),
            final(FATIHA[1]),
        ])
        session = RecitationSession(self.verses, source=source)
        seen = []
        session.start(listener=seen.append)
        self.assertTrue(session.paused)
        self.assertEqual(source.stop_count, 1)
        self.assertFalse(session.active)

        session.resume()
        self.assertEqual(source.start_count, 2)
        self.assertEqual(session.current_index, 1)
        self.assertTrue(source.exhausted)
        self.assertEqual(session.transient_error_count, 1)
        self.assertEqual([a.index for a in seen if a.detected], [0, 1])

    def test_end_without_detection_runs_final_check(self):
        source = ReplayTranscriptSource([interim("بسم الله")])
        session = RecitationSession(self.verses, source=source)
        session.start()
        self.assertFalse(session.active)
        self.assertEqual(session.last_assessment.result.accuracy, 50.0)


if __name__ == "__main__":
    unittest.main()
