from challenge_tracker.models.challenge import ChallengeRow, DailyTrackRow, TrackTaskRow
