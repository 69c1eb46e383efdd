from uci_client.candidates import ScoreType


def feed(engine, *lines: str) -> None:
    for line in lines:
        engine.handle_line(line)
    engine.process_events()


def test_uciok_sets_initialized_and_emits_ready(offline_engine, sink) -> None:
    feed(offline_engine, "id name Stockfish", "uciok")
    assert offline_engine.state.initialized is True
    assert offline_engine.state.ready is False
    assert sink.names() == ["engine_ready"]


def test_readyok_only_sets_flag(offline_engine, sink) -> None:
    feed(offline_engine, "readyok")
    assert offline_engine.state.ready is True
    assert sink.events == []


def test_bestmove_with_and_without_ponder(offline_engine, sink) -> None:
    feed(offline_engine, "bestmove e2e4 ponder e7e5", "bestmove d2d4")
    assert sink.of("best_move_calculated") == [("e2e4", "e7e5"), ("d2d4", "")]
    assert "candidate_moves_calculated" not in sink.names()


def test_single_candidate_depth_overwrite(offline_engine, sink) -> None:
    offline_engine.set_print_output(False)
    feed(
        offline_engine,
        "info depth 10 multipv 1 score cp 30 pv e2e4 e7e5",
        "info depth 12 multipv 1 score cp 35 pv e2e4 e7e5",
        "bestmove e2e4",
    )
    assert sink.names() == ["best_move_calculated", "candidate_moves_calculated"]
    (candidates,) = sink.of("candidate_moves_calculated")[0]
    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.multipv == 1
    assert candidate.depth == 12
    assert candidate.score_type is ScoreType.CENTIPAWN
    assert candidate.score == 35
    assert candidate.move == "e2e4"


def test_multipv_list_is_ranked_and_cleared_after_bestmove(offline_engine, sink) -> None:
    offline_engine.set_print_output(False)
    offline_engine.settings.multipv = 3
    feed(
        offline_engine,
        "info depth 8 multipv 2 score cp 12 pv d2d4",
        "info depth 8 multipv 1 score mate 4 pv e2e4",
        "info depth 8 multipv 3 score cp -5 pv g1f3",
        "bestmove e2e4 ponder e7e5",
    )
    (candidates,) = sink.of("candidate_moves_calculated")[0]
    assert [c.move for c in candidates] == ["e2e4", "d2d4", "g1f3"]
    assert candidates[0].score_type is ScoreType.MATE
    assert len(offline_engine.candidates) == 0

    feed(offline_engine, "bestmove e2e4")
    assert len(sink.of("candidate_moves_calculated")) == 1


def test_info_without_pv_never_creates_candidate(offline_engine, sink) -> None:
    offline_engine.set_print_output(False)
    offline_engine.settings.multipv = 2
    feed(
        offline_engine,
        "info depth 10 multipv 1 score cp 30 nodes 5000",
        "info depth 10 multipv 2 score cp 10 nodes 5000",
        "bestmove e2e4",
    )
    assert sink.names() == ["best_move_calculated"]


def test_info_events_follow_print_output(offline_engine, sink) -> None:
    line = "info depth 1 seldepth 1 multipv 1 score cp 20 pv e2e4"
    feed(offline_engine, line)
    assert sink.of("info_received") == [(line,)]

    offline_engine.set_print_output(False)
    feed(offline_engine, line)
    assert len(sink.of("info_received")) == 1


def test_unknown_and_blank_lines_are_ignored(offline_engine, sink) -> None:
    feed(offline_engine, "", "   ", "option name Hash type spin default 16", "copyprotection ok")
    assert sink.events == []
    assert offline_engine.state.initialized is False


def test_events_are_deferred_until_processed(offline_engine, sink) -> None:
    offline_engine.handle_line("uciok")
    assert sink.events == []
    assert offline_engine.process_events() == 1
    assert sink.names() == ["engine_ready"]
