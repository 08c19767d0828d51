"""
Integration tests for the game controller and the service facade.

Tests:
- Starting games per mode
- Fixed answer order while navigating
- One recorded attempt per question per game, linked to its session
- Finishing a game (session, daily progress, streak); empty games refuse
- Review facts for wrong answers
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from trivia_engine.core.errors import EmptyGameError, MissingCategoryError, QuestionNotInGameError
from trivia_engine.core.modes import TriviaMode
from trivia_engine.db.models import QuestionAttempt


async def play(game, wrong_ids=()):
    """Answer every question, missing the ones in ``wrong_ids``."""
    for question in game.questions:
        options = game.answers_for(question)
        if question.id in wrong_ids:
            choice = next(o for o in options if o != question.correct_answer)
        else:
            choice = question.correct_answer
        await game.submit_answer(question.id, choice)


class TestStartGame:
    @pytest.mark.asyncio
    async def test_daily_game_opens_progress(self, service, seed, clock):
        await seed.category_with_questions("space", 4, shown_at=clock())

        game = await service.start_game(TriviaMode.DAILY)

        assert game.total_questions == 4
        progress = await service.get_today_progress()
        assert progress is not None and not progress.is_completed

    @pytest.mark.asyncio
    async def test_category_game(self, service, seed):
        await seed.category_with_questions("space", 12)

        game = await service.start_game("category", category_slug="space")

        assert game.mode is TriviaMode.CATEGORY
        assert game.total_questions == 10
        assert game.category_slug == "space"

    @pytest.mark.asyncio
    async def test_category_game_needs_slug(self, service):
        with pytest.raises(MissingCategoryError):
            await service.start_game(TriviaMode.CATEGORY)

    @pytest.mark.asyncio
    async def test_empty_pool_gives_empty_game(self, service):
        game = await service.start_game(TriviaMode.MIXED)

        assert game.total_questions == 0
        assert game.current_question is None
        assert not game.is_complete


class TestNavigation:
    @pytest.mark.asyncio
    async def test_answer_order_fixed_across_navigation(self, service, seed):
        await seed.category_with_questions("space", 3)
        game = await service.start_game(TriviaMode.MIXED)

        first = game.answers_for(game.current_question)
        game.next()
        game.next()
        assert game.next() is None
        game.go_to(0)

        assert game.answers_for(game.current_question) == first
        assert game.previous() is None

    @pytest.mark.asyncio
    async def test_go_to_out_of_range(self, service, seed):
        await seed.category_with_questions("space", 2)
        game = await service.start_game(TriviaMode.MIXED)

        with pytest.raises(IndexError):
            game.go_to(5)


class TestAnswers:
    @pytest.mark.asyncio
    async def test_one_attempt_per_question(self, service, seed):
        await seed.category_with_questions("space", 2)
        game = await service.start_game(TriviaMode.MIXED)
        question = game.current_question

        first = await game.submit_answer(question.id, "Wrong 1")
        second = await game.submit_answer(question.id, question.correct_answer)

        assert second == first
        assert not second.is_correct
        await game.finish()
        assert await service.recorder.attempt_count(question.id) == 1

    @pytest.mark.asyncio
    async def test_unfinished_game_records_nothing(self, service, seed):
        await seed.category_with_questions("space", 2)
        game = await service.start_game(TriviaMode.MIXED)
        await play(game)

        for question in game.questions:
            assert await service.recorder.attempt_count(question.id) == 0
        assert await service.get_mixed_trivia_questions_count() == 2

    @pytest.mark.asyncio
    async def test_unknown_question(self, service, seed):
        await seed.category_with_questions("space", 2)
        game = await service.start_game(TriviaMode.MIXED)

        with pytest.raises(QuestionNotInGameError):
            await game.submit_answer(9999, "Right")
        with pytest.raises(KeyError):
            game.answers_for(9999)

    @pytest.mark.asyncio
    async def test_in_game_best_streak(self, service, seed):
        await seed.category_with_questions("space", 5)
        game = await service.start_game(TriviaMode.MIXED)
        ids = [q.id for q in game.questions]

        await play(game, wrong_ids={ids[2]})

        assert game.correct_count == 4
        assert game.best_streak == 2
        assert game.wrong_question_ids == [ids[2]]
        assert game.is_complete


class TestFinishGame:
    @pytest.mark.asyncio
    async def test_daily_finish_updates_streak(self, service, seed, clock):
        await seed.category_with_questions("space", 3, shown_at=clock())
        game = await service.start_game(TriviaMode.DAILY)
        await play(game, wrong_ids={game.questions[0].id})
        clock.advance(seconds=90)

        session_id = await game.finish()

        assert await service.is_daily_trivia_completed()
        assert await service.get_daily_streak() == 1
        progress = await service.get_today_progress()
        assert (progress.total_questions, progress.correct_answers) == (3, 2)

        saved = await service.get_session_by_id(session_id)
        assert saved.trivia_mode is TriviaMode.DAILY
        assert saved.correct_answers == 2
        assert saved.elapsed_time == 90
        assert saved.wrong_question_ids == [game.questions[0].id]

    @pytest.mark.asyncio
    async def test_finish_is_idempotent(self, service, seed):
        await seed.category_with_questions("space", 2)
        game = await service.start_game(TriviaMode.MIXED)
        await play(game)

        first = await game.finish(elapsed_time=30)
        second = await game.finish(elapsed_time=30)

        assert first == second
        assert len(await service.get_all_sessions()) == 1
        for question in game.questions:
            assert await service.recorder.attempt_count(question.id) == 1

    @pytest.mark.asyncio
    async def test_attempts_carry_session_id(self, service, seed, db):
        await seed.category_with_questions("space", 4)
        game = await service.start_game(TriviaMode.MIXED)
        await play(game, wrong_ids={game.questions[0].id})

        session_id = await game.finish()

        async with db.session() as session:
            result = await session.execute(select(QuestionAttempt.trivia_session_id))
            linked = result.scalars().all()
        assert len(linked) == game.answered_count == 4
        assert set(linked) == {session_id}

    @pytest.mark.asyncio
    async def test_partly_answered_game_records_answered_only(self, service, seed):
        await seed.category_with_questions("space", 3)
        game = await service.start_game(TriviaMode.MIXED)
        answered, skipped = game.questions[0], game.questions[1]
        await game.submit_answer(answered.id, answered.correct_answer)

        await game.finish()

        assert await service.recorder.attempt_count(answered.id) == 1
        assert await service.recorder.attempt_count(skipped.id) == 0

    @pytest.mark.asyncio
    async def test_empty_daily_game_cannot_finish(self, service, seed):
        await seed.category_with_questions("space", 3)
        game = await service.start_game(TriviaMode.DAILY)
        assert game.total_questions == 0

        with pytest.raises(EmptyGameError):
            await game.finish()

        assert not await service.is_daily_trivia_completed()
        assert await service.get_daily_streak() == 0
        assert await service.get_all_sessions() == []

    @pytest.mark.asyncio
    async def test_empty_mixed_game_cannot_finish(self, service):
        game = await service.start_game(TriviaMode.MIXED)

        with pytest.raises(ValueError):
            await game.finish(elapsed_time=0)

        assert await service.get_all_sessions() == []

    @pytest.mark.asyncio
    async def test_mixed_finish_leaves_daily_alone(self, service, seed):
        await seed.category_with_questions("space", 2)
        game = await service.start_game(TriviaMode.MIXED)
        await play(game)
        await game.finish()

        assert not await service.is_daily_trivia_completed()

    @pytest.mark.asyncio
    async def test_answered_questions_leave_mixed_pool(self, service, seed):
        await seed.category_with_questions("space", 3)
        game = await service.start_game(TriviaMode.MIXED)
        await play(game)
        await game.finish()

        assert await service.get_mixed_trivia_questions_count() == 0


class TestReviewFacts:
    @pytest.mark.asyncio
    async def test_facts_for_wrong_answers(self, service, seed):
        await seed.category_with_questions("space", 3)
        game = await service.start_game(TriviaMode.MIXED)
        missed = game.questions[1]
        await play(game, wrong_ids={missed.id})

        facts = await service.get_facts_for_wrong_answers(game.wrong_question_ids)

        assert [f.id for f in facts] == [missed.fact_id]
        assert facts[0].category_slug == "space"


class TestServiceHelpers:
    @pytest.mark.asyncio
    async def test_shuffled_answers(self, service, seed):
        await seed.category_with_questions("space", 1)
        (question,) = await service.get_mixed_trivia_questions()

        answers = service.get_shuffled_answers(question)

        assert sorted(answers) == sorted([question.correct_answer, *question.wrong_answers])

    @pytest.mark.asyncio
    async def test_estimated_time(self, service):
        assert service.get_estimated_time_minutes(10) == 8

    @pytest.mark.asyncio
    async def test_yesterdays_daily_pool_is_gone(self, service, seed, clock):
        await seed.category_with_questions("space", 2, shown_at=clock() - timedelta(days=1))
        game = await service.start_game(TriviaMode.DAILY)
        assert game.total_questions == 0
