"""Unit tests for dashboard stats (src/gamification/stats.py)"""
from src.gamification.learning_path import create_learning_path, update_step
from src.gamification.quiz_ledger import record_quiz
from src.gamification.stats import compute_stats
from src.models.user import Badge


def test_compute_stats_empty_history(learning_path, test_user):
    """Test a fresh path yields zeros without dividing by zero"""
    stats = compute_stats(learning_path, test_user)

    assert stats.avg_quiz_score == 0
    assert stats.last_quiz_score == 0
    assert stats.total_quizzes == 0
    assert stats.completed_steps == 0
    assert stats.total_steps == 6
    assert stats.overall_progress == 0
    assert stats.xp == 0


def test_compute_stats_progress_and_quizzes(learning_path, test_user, fixed_now):
    """Test step completion and quiz aggregates"""
    path = update_step(learning_path, 1, fixed_now, progress=100).path
    path = update_step(path, 2, fixed_now, progress=100).path
    path = record_quiz(path, "q1", "js", 4, 5, fixed_now).path   # 80%
    path = record_quiz(path, "q2", "js", 1, 3, fixed_now).path   # 33%

    stats = compute_stats(path, test_user)

    assert stats.completed_steps == 2
    assert stats.overall_progress == 33
    assert stats.avg_quiz_score == 57   # (80 + 33) / 2 = 56.5
    assert stats.last_quiz_score == 33
    assert stats.total_quizzes == 2
    assert stats.xp == 50 + 75 + 40 + 10


def test_compute_stats_passes_through_user_state(learning_path, test_user, fixed_now):
    """Test streak and badges come straight from the user"""
    user = test_user.model_copy(
        update={"badges": [Badge(id="first-steps", name="First Steps", earned_at=fixed_now)]}
    )

    stats = compute_stats(learning_path, user)

    assert stats.streak == user.streak
    assert [badge.id for badge in stats.badges] == ["first-steps"]


def test_compute_stats_xp_from_path_only(learning_path, test_user, fixed_now):
    """Test XP is read from the learning path"""
    path = record_quiz(learning_path, "q1", "js", 5, 5, fixed_now).path

    assert compute_stats(path, test_user).xp == path.total_xp == 50


def test_compute_stats_all_completed(fixed_now, test_user):
    path = create_learning_path("u1", fixed_now, titles=["A", "B"])
    path = update_step(path, 1, fixed_now, progress=100).path
    path = update_step(path, 2, fixed_now, progress=100).path

    assert compute_stats(path, test_user).overall_progress == 100
