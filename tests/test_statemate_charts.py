import copy

from embenchpy.statemate_charts import (
    BITLIST_SIZE,
    Bit,
    WindowLiftState,
    block_erkennung_step,
    einklemmschutz_step,
    kindersicherung_step,
    tuermodul_step,
)


def _state(*active, **values):
    state = WindowLiftState()
    for bit in active:
        state.bits[bit] = 1
    for name, value in values.items():
        setattr(state, name, value)
    state.stable = True
    return state


# --- state container --------------------------------------------------------

def test_reset_restores_initial_values():
    state = WindowLiftState()
    state.bits[Bit.EINKLEMMUNG] = 1
    state.ctrl_n = 42
    state.stable = True
    state.b_state = 3
    state.reset()
    assert state == WindowLiftState()
    assert len(state.bits) == BITLIST_SIZE
    assert sum(state.bits) == 0


def test_states_do_not_share_bits():
    first = WindowLiftState()
    second = WindowLiftState()
    first.bits[Bit.END_REVERS] = 1
    assert second.bits[Bit.END_REVERS] == 0


# --- child lock -------------------------------------------------------------

def test_kindersicherung_inactive_does_nothing():
    state = _state(door_sfha_zentral=1, door_sfhz_zentral=1)
    before = copy.deepcopy(state)
    kindersicherung_step(state)
    assert state == before


def test_kindersicherung_central_round_trip():
    state = _state(Bit.ACTIVE_KINDERSICHERUNG)
    kindersicherung_step(state)
    assert state.stable is False
    # The source's final check expects this chart to rest in WAITING (3).
    assert state.kindersicherung_state == 3
    waiting = state.kindersicherung_state

    state.stable = True
    kindersicherung_step(state)
    assert state.stable is True
    assert state.kindersicherung_state == waiting

    state.door_sfha_zentral = 1
    state.door_sfhz_zentral = 1
    kindersicherung_step(state)
    assert state.stable is False
    assert state.kindersicherung_state != waiting
    assert (state.door_sfha_copy, state.door_sfhz_copy) == (1, 1)

    state.stable = True
    state.door_sfha_zentral = 0
    state.door_sfhz_zentral = 0
    kindersicherung_step(state)
    assert state.kindersicherung_state == waiting
    assert state.zentral_state == 0
    assert (state.door_sfha_copy, state.door_sfhz_copy) == (0, 0)


def test_kindersicherung_mechanical_switch_needs_kl50_off():
    state = _state(Bit.ACTIVE_KINDERSICHERUNG, kindersicherung_state=3,
                   door_kl_50=1, door_sfhz_mec=1)
    kindersicherung_step(state)
    assert state.stable is True
    assert state.kindersicherung_state == 3
    assert state.door_sfhz_copy == 0

    state.door_kl_50 = 0
    kindersicherung_step(state)
    assert state.stable is False
    assert state.kindersicherung_state != 3
    assert state.door_sfhz_copy == 1
    assert state.door_sfha_copy == 0


def test_kindersicherung_follows_rising_close_edge():
    state = _state(Bit.ACTIVE_KINDERSICHERUNG, kindersicherung_state=1,
                   zentral_state=1, door_sfha_zentral=1,
                   door_sfha_zentral_old=1, door_sfhz_zentral=1)
    kindersicherung_step(state)
    assert state.stable is False
    assert state.door_sfhz_copy == 1
    assert state.door_sfha_copy == 0
    assert state.zentral_state == 1


# --- door module ------------------------------------------------------------

def test_tuermodul_deactivation_clears_events():
    state = _state(Bit.ACTIVE_TUERMODUL_OLD, Bit.ENTERED_WIEDERHOLSPERRE,
                   Bit.EXITED_BEREIT)
    tuermodul_step(state)
    assert state.bits[Bit.ENTERED_WIEDERHOLSPERRE] == 0
    assert state.bits[Bit.EXITED_BEREIT] == 0
    assert state.b_state == 0
    assert state.stable is True


def test_tuermodul_first_entry_matches_resting_states():
    state = _state(Bit.ACTIVE_TUERMODUL)
    tuermodul_step(state)
    assert state.stable is False
    # Values from the source's final check of the controller.
    assert state.kindersicherung_state == 3
    assert state.b_state == 2
    assert state.a_state == 1
    assert state.wiederholsperre_state == 1
    assert state.block_erkennung_state == 1
    assert state.ctrl_n == 0
    assert state.bits[Bit.ACTIVE_KINDERSICHERUNG_COPY] == 1
    assert state.bits[Bit.ACTIVE_BLOCK_ERKENNUNG_COPY] == 1
    assert (state.bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY]
            == state.bits[Bit.ENTERED_WIEDERHOLSPERRE])


def _door(**values):
    base = dict(a_state=1, wiederholsperre_state=1)
    base.update(values)
    return _state(Bit.ACTIVE_TUERMODUL, Bit.ACTIVE_KINDERSICHERUNG,
                  Bit.ACTIVE_BLOCK_ERKENNUNG, **base)


def test_repeat_lock_counts_motor_runs():
    n0 = 5
    state = _door(b_state=1, ctrl_n=n0, ctrl_n_old=n0, step=1, time=5,
                  t_wiederholsperre_or_bereit=4, door_mfhz=1)
    tuermodul_step(state)
    assert state.stable is False
    assert state.ctrl_n == n0 + 1


def test_repeat_lock_counts_down_when_idle():
    n0 = 4
    state = _door(b_state=1, ctrl_n=n0, ctrl_n_old=n0, step=1, time=5,
                  t_wiederholsperre=2)
    tuermodul_step(state)
    assert state.stable is False
    assert state.ctrl_n == n0 - 1


def test_repeat_lock_timer_is_unsigned():
    n0 = 5
    state = _door(b_state=1, ctrl_n=n0, ctrl_n_old=n0, step=1, time=1,
                  t_wiederholsperre_or_bereit=2, door_mfhz=1)
    tuermodul_step(state)
    assert state.stable is True
    assert state.ctrl_n == n0


def test_repeat_lock_only_on_first_step():
    n0 = 5
    state = _door(b_state=1, ctrl_n=n0, ctrl_n_old=n0, step=2, time=5,
                  t_wiederholsperre_or_bereit=4, door_mfhz=1)
    tuermodul_step(state)
    assert state.ctrl_n == n0
    assert state.stable is True


def test_uninitialised_ready_starts_opening():
    state = _door(b_state=2, nicht_initialisiert_state=3, door_sfha=1)
    tuermodul_step(state)
    assert state.stable is False
    assert state.door_mfha_copy == 1
    assert state.nicht_initialisiert_state != 3


def test_initialised_open_and_stop_at_top():
    state = _door(b_state=3, initialisiert_state=3, door_sfha=1,
                  door_position=100)
    ready = state.initialisiert_state
    tuermodul_step(state)
    assert state.stable is False
    assert state.door_mfha_copy == 1
    assert state.initialisiert_state != ready

    state.stable = True
    state.door_position = 405
    tuermodul_step(state)
    assert state.stable is False
    assert state.door_mfha_copy == 0
    assert state.initialisiert_state == ready


def test_initialised_no_opening_at_top():
    state = _door(b_state=3, initialisiert_state=3, door_sfha=1,
                  door_position=405)
    tuermodul_step(state)
    assert state.stable is True
    assert state.door_mfha_copy == 0
    assert state.initialisiert_state == 3


def test_block_while_closing_loses_initialisation():
    state = _door(b_state=3, initialisiert_state=2, door_block=1,
                  door_mfhz=1, door_mfhz_copy=1, time=7)
    tuermodul_step(state)
    assert state.stable is False
    assert state.sc_2352_1 == state.time
    assert state.door_mfhz_copy == 0
    assert state.b_state == 2


def test_trapping_during_manual_close_reverses_and_recovers():
    state = _door(b_state=3, initialisiert_state=2, schliessen_state=2,
                  manuell_schliessen_state=2, door_position=100,
                  door_sfhz=1, door_sfhz_old=1, door_mfhz_copy=1, time=9)
    closing = state.manuell_schliessen_state
    state.bits[Bit.EINKLEMMUNG] = 1
    tuermodul_step(state)
    assert state.stable is False
    assert state.door_mfhz_copy == 0
    assert state.door_mfha_copy == 1
    assert state.ctrl_inrevers1_copy == 1
    assert state.bits[Bit.END_REVERS_COPY] == 1
    assert state.bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] == 0
    assert state.sc_1739_10 == state.time

    state.stable = True
    state.bits[Bit.EINKLEMMUNG] = 0
    state.bits[Bit.END_REVERS] = 1
    tuermodul_step(state)
    assert state.manuell_schliessen_state == closing
    assert state.ctrl_inrevers1_copy == 0
    assert state.door_mfhz_copy == 1
    assert state.door_mfha_copy == 0
    assert state.bits[Bit.END_REVERS_COPY] == 0
    assert state.bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] == 1


# --- anti-trap --------------------------------------------------------------

def test_einklemmschutz_inactive_does_nothing():
    state = _state(door_eks_leiste_aktiv=1)
    before = copy.deepcopy(state)
    einklemmschutz_step(state)
    assert state == before


def test_einklemmschutz_detects_and_releases():
    state = _state(Bit.ACTIVE_EINKLEMMSCHUTZ)
    einklemmschutz_step(state)
    assert state.stable is False
    # The source's final check expects NORMALBETRIEB (1) here.
    assert state.einklemmschutz_state == 1
    normal = state.einklemmschutz_state

    state.stable = True
    state.door_eks_leiste_aktiv = 1
    einklemmschutz_step(state)
    assert state.bits[Bit.EINKLEMMUNG] == 1
    assert state.einklemmschutz_state != normal

    state.stable = True
    state.door_eks_leiste_aktiv_old = 1
    einklemmschutz_step(state)
    assert state.stable is True
    assert state.bits[Bit.EINKLEMMUNG] == 0

    state.door_eks_leiste_aktiv = 0
    einklemmschutz_step(state)
    assert state.stable is False
    assert state.einklemmschutz_state == normal


def test_einklemmschutz_ignored_with_both_switches():
    state = _state(Bit.ACTIVE_EINKLEMMSCHUTZ, einklemmschutz_state=1,
                   door_eks_leiste_aktiv=1, door_sfhz=1, door_sfha=1)
    einklemmschutz_step(state)
    assert state.stable is True
    assert state.bits[Bit.EINKLEMMUNG] == 0
    assert state.einklemmschutz_state == 1


# --- block detection --------------------------------------------------------

def test_block_erkennung_deactivation_clears_event():
    state = _state(Bit.ACTIVE_BLOCK_ERKENNUNG_OLD,
                   Bit.ENTERED_EINSCHALTSTROM_MESSEN)
    block_erkennung_step(state)
    assert state.bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] == 0
    assert state.block_erkennung_state == 0


def test_block_erkennung_starts_measuring_on_current():
    state = _state(Bit.ACTIVE_BLOCK_ERKENNUNG, block_erkennung_state=1,
                   door_i_ein=5, door_block_copy=1, block_ctrl_n=7)
    block_erkennung_step(state)
    assert state.stable is False
    assert state.block_erkennung_state != 1
    assert state.block_ctrl_n == 0
    assert state.block_ctrl_i_ein_max == 2
    assert state.door_block_copy == 0
    assert state.bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] == 1


def test_block_erkennung_measuring_then_block():
    state = _state(Bit.ACTIVE_BLOCK_ERKENNUNG, block_erkennung_state=1,
                   door_i_ein=5)
    block_erkennung_step(state)
    measuring = state.bewegung_state

    state.stable = True
    state.block_ctrl_n = 3
    state.block_ctrl_n_old = 3
    state.step = 1
    state.time = 4
    state.t_einschaltstrom = 2
    block_erkennung_step(state)
    assert state.stable is True
    assert state.block_ctrl_n == 3
    assert state.bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] == 0
    assert state.bewegung_state == measuring

    state.block_ctrl_n = 11
    block_erkennung_step(state)
    assert state.stable is False
    assert state.bewegung_state != measuring

    state.stable = True
    block_erkennung_step(state)
    assert state.stable is False
    assert state.door_block_copy == 1


def test_block_erkennung_motor_stop_returns_to_rest():
    state = _state(Bit.ACTIVE_BLOCK_ERKENNUNG, block_erkennung_state=2,
                   bewegung_state=2, door_mfha_old=1)
    block_erkennung_step(state)
    assert state.stable is False
    # Resting values from the source's final check.
    assert state.block_erkennung_state == 1
    assert state.bewegung_state == 0