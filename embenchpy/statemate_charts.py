"""State and statecharts of an experimental car window lift controller.

The controller is made of four concurrent statecharts that share one set of
signals. Each ``*_step`` function performs one reaction of its chart and
clears :attr:`WindowLiftState.stable` whenever a transition was taken.
A chart state of 0 means that the chart has not been entered yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import List

BITLIST_SIZE = 64
"""Number of event and activity flags kept in :attr:`WindowLiftState.bits`."""

_ULONG_MASK = (1 << 64) - 1


class Bit(IntEnum):
    """Positions of event and activity flags in :attr:`WindowLiftState.bits`."""

    ENTERED_EINSCHALTSTROM_MESSEN = 0
    ENTERED_EINSCHALTSTROM_MESSEN_COPY = 1
    ENTERED_WIEDERHOLSPERRE = 4
    ENTERED_WIEDERHOLSPERRE_COPY = 5
    EXITED_BEREIT = 6
    EXITED_BEREIT_COPY = 7
    ACTIVE_KINDERSICHERUNG = 10
    ACTIVE_KINDERSICHERUNG_COPY = 11
    ACTIVE_KINDERSICHERUNG_OLD = 12
    ACTIVE_TUERMODUL = 13
    ACTIVE_TUERMODUL_COPY = 14
    ACTIVE_TUERMODUL_OLD = 15
    ACTIVE_EINKLEMMSCHUTZ = 16
    ACTIVE_EINKLEMMSCHUTZ_COPY = 17
    ACTIVE_EINKLEMMSCHUTZ_OLD = 18
    ACTIVE_BLOCK_ERKENNUNG = 19
    ACTIVE_BLOCK_ERKENNUNG_COPY = 20
    ACTIVE_BLOCK_ERKENNUNG_OLD = 21
    END_REVERS = 22
    END_REVERS_COPY = 23
    EINKLEMMUNG = 24


def _new_bits() -> List[int]:
    return [0] * BITLIST_SIZE


@dataclass
class WindowLiftState:
    """Every signal, timer and chart state of the window lift controller.

    ``door_*`` are signals of the door module, ``du_*`` those of the driver
    unit, ``ctrl_*`` and ``block_ctrl_*`` the variables of the door module
    and block detection charts. ``*_copy`` and ``*_old`` hold the next and
    previous value of a signal.
    """

    bits: List[int] = field(default_factory=_new_bits)

    # Timers (unsigned clock values; 0 means "not running").
    t_einschaltstrom: int = 0
    t_wiederholsperre_or_bereit: int = 0
    t_wiederholsperre: int = 0
    sc_2375_2: int = 0
    sc_2352_1: int = 0
    sc_2329_1: int = 0
    sc_1781_10: int = 0
    sc_1739_10: int = 0

    # Door module control chart variables.
    ctrl_n: int = 0
    ctrl_n_copy: int = 0
    ctrl_n_old: int = 0
    ctrl_inrevers1: int = 0
    ctrl_inrevers1_copy: int = 0
    ctrl_inrevers2: int = 0
    ctrl_inrevers2_copy: int = 0
    ctrl_ft: int = 0

    # Door module signals.
    door_position: int = 0
    door_i_ein: int = 0
    door_i_ein_old: int = 0
    door_sfhz_zentral: int = 0
    door_sfhz_zentral_old: int = 0
    door_sfhz_mec: int = 0
    door_sfhz_mec_old: int = 0
    door_sfha_zentral: int = 0
    door_sfha_zentral_old: int = 0
    door_sfha_mec: int = 0
    door_sfha_mec_old: int = 0
    door_kl_50: int = 0
    door_block: int = 0
    door_block_copy: int = 0
    door_block_old: int = 0
    door_ft: int = 0
    door_sfhz: int = 0
    door_sfhz_copy: int = 0
    door_sfhz_old: int = 0
    door_sfha: int = 0
    door_sfha_copy: int = 0
    door_sfha_old: int = 0
    door_mfhz: int = 0
    door_mfhz_copy: int = 0
    door_mfhz_old: int = 0
    door_mfha: int = 0
    door_mfha_copy: int = 0
    door_mfha_old: int = 0
    door_eks_leiste_aktiv: int = 0
    door_eks_leiste_aktiv_old: int = 0
    door_com_open: int = 0
    door_com_close: int = 0

    # Driver unit signals.
    du_mfh: int = 0
    du_mfh_copy: int = 0
    du_position: int = 0
    du_i_ein: int = 0
    du_i_ein_old: int = 0
    du_kl_50: int = 0
    du_s_fh_ftzu: int = 0
    du_s_fh_ftauf: int = 0
    du_ft: int = 0
    du_eks_leiste_aktiv: int = 0
    du_eks_leiste_aktiv_old: int = 0
    du_s_fh_tmbfaufcan: int = 0
    du_s_fh_tmbfaufcan_copy: int = 0
    du_s_fh_tmbfaufcan_old: int = 0
    du_s_fh_tmbfzucan: int = 0
    du_s_fh_tmbfzucan_copy: int = 0
    du_s_fh_tmbfzucan_old: int = 0
    du_s_fh_tmbfzudisc: int = 0
    du_s_fh_tmbfzudisc_old: int = 0
    du_s_fh_tmbfaufdisc: int = 0
    du_s_fh_tmbfaufdisc_old: int = 0
    du_s_fh_zudisc: int = 0
    du_s_fh_aufdisc: int = 0
    du_door_id: int = 0
    du_block: int = 0
    du_block_copy: int = 0
    du_block_old: int = 0
    du_mfhz: int = 0
    du_mfhz_copy: int = 0
    du_mfhz_old: int = 0
    du_mfha: int = 0
    du_mfha_copy: int = 0
    du_mfha_old: int = 0

    # Block detection chart variables.
    block_ctrl_i_ein_max: int = 0
    block_ctrl_i_ein_max_copy: int = 0
    block_ctrl_n: int = 0
    block_ctrl_n_copy: int = 0
    block_ctrl_n_old: int = 0

    # Scheduler.
    time: int = 0
    stable: bool = False
    step: int = 0

    # Chart states.
    nicht_initialisiert_state: int = 0
    zentral_state: int = 0
    mec_state: int = 0
    kindersicherung_state: int = 0
    b_state: int = 0
    a_state: int = 0
    wiederholsperre_state: int = 0
    initialisiert_state: int = 0
    tipp_schliessen_state: int = 0
    manuell_schliessen_state: int = 0
    oeffnen_state: int = 0
    schliessen_state: int = 0
    steuerung_dummy_state: int = 0
    einklemmschutz_state: int = 0
    bewegung_state: int = 0
    block_erkennung_state: int = 0

    def reset(self) -> None:
        """Return every field to its initial value."""
        fresh = WindowLiftState()
        for item in fields(self):
            setattr(self, item.name, getattr(fresh, item.name))


def _rising(now: int, old: int) -> bool:
    return bool(now) and not old


def _falling(now: int, old: int) -> bool:
    return not now and bool(old)


def _elapsed(state: WindowLiftState, start: int) -> int:
    """Clock ticks since ``start``, with unsigned wrap-around."""
    return (state.time - start) & _ULONG_MASK


# --- child lock chart -------------------------------------------------------

def _follow_switches(
    state: WindowLiftState, open_now: int, open_old: int,
    close_now: int, close_old: int,
) -> None:
    """Pass switch edges on to the door module's open/close requests."""
    if _rising(open_now, open_old):
        state.stable = False
        state.door_sfha_copy = 1
    elif _rising(close_now, close_old):
        state.stable = False
        state.door_sfhz_copy = 1
    elif _falling(open_now, open_old):
        state.stable = False
        state.door_sfha_copy = 0
    elif _falling(close_now, close_old):
        state.stable = False
        state.door_sfhz_copy = 0


def _kindersicherung_waiting(s: WindowLiftState) -> None:
    if not s.door_kl_50 and s.door_sfhz_mec and s.door_sfha_mec:
        s.stable = False
        s.door_sfhz_copy = 1
        s.door_sfha_copy = 1
        s.kindersicherung_state = 2
    elif not s.door_kl_50 and s.door_sfhz_mec and not s.door_sfha_mec:
        s.stable = False
        s.door_sfhz_copy = 1
        s.kindersicherung_state = 2
    elif not s.door_kl_50 and not s.door_sfhz_mec and s.door_sfha_mec:
        s.stable = False
        s.door_sfha_copy = 1
        s.kindersicherung_state = 2
    elif not s.door_sfhz_zentral and s.door_sfha_zentral and not s.door_kl_50:
        s.stable = False
        s.door_sfha_copy = 1
        s.kindersicherung_state = 1
    elif s.door_sfhz_zentral and s.door_sfha_zentral:
        s.stable = False
        s.door_sfha_copy = 1
        s.door_sfhz_copy = 1
        s.kindersicherung_state = 1
    elif s.door_sfhz_zentral and not s.door_sfha_zentral and not s.door_kl_50:
        s.stable = False
        s.door_sfhz_copy = 1
        s.kindersicherung_state = 1


def kindersicherung_step(state: WindowLiftState) -> None:
    """React once in the child lock chart (central versus mechanical switches)."""
    s = state
    if not s.bits[Bit.ACTIVE_KINDERSICHERUNG]:
        return
    current = s.kindersicherung_state
    if current == 1:  # ZENTRAL
        if not (s.door_sfha_zentral or s.door_sfhz_zentral):
            s.stable = False
            s.door_sfhz_copy = 0
            s.door_sfha_copy = 0
            s.kindersicherung_state = 3
            s.zentral_state = 0
        elif s.zentral_state == 1:
            _follow_switches(s, s.door_sfha_zentral, s.door_sfha_zentral_old,
                             s.door_sfhz_zentral, s.door_sfhz_zentral_old)
        else:
            s.stable = False
    elif current == 2:  # MEC
        if not (s.door_sfha_mec or s.door_sfhz_mec):
            s.stable = False
            s.door_sfhz_copy = 0
            s.door_sfha_copy = 0
            s.kindersicherung_state = 3
            s.mec_state = 0
        elif s.mec_state == 1:
            _follow_switches(s, s.door_sfha_mec, s.door_sfha_mec_old,
                             s.door_sfhz_mec, s.door_sfhz_mec_old)
        else:
            s.stable = False
    elif current == 3:  # WAITING
        _kindersicherung_waiting(s)
    else:
        s.stable = False
        s.kindersicherung_state = 3


# --- door module chart ------------------------------------------------------

def _nicht_initialisiert(s: WindowLiftState) -> None:
    if _rising(s.door_block, s.door_block_old) and s.door_mfhz:
        s.stable = False
        s.door_mfhz_copy = 0
        s.sc_2329_1 = s.time
        s.b_state = 3
        s.initialisiert_state = 3
        return
    current = s.nicht_initialisiert_state
    if current == 1:  # SCHLIESSEN
        if not s.door_sfhz:
            s.stable = False
            s.door_mfhz_copy = 0
            s.nicht_initialisiert_state = 3
    elif current == 2:  # OEFFNEN
        if not s.door_sfha:
            s.stable = False
            s.door_mfha_copy = 0
            s.nicht_initialisiert_state = 3
    elif current == 3:  # BEREIT
        if s.door_sfha:
            s.stable = False
            s.door_mfha_copy = 1
            s.nicht_initialisiert_state = 2
        elif s.door_sfhz:
            s.stable = False
            s.door_mfhz_copy = 1
            s.nicht_initialisiert_state = 1
    else:
        s.stable = False
        s.nicht_initialisiert_state = 3


def _oeffnen(s: WindowLiftState) -> None:
    if s.door_position >= 405:
        s.stable = False
        s.door_mfha_copy = 0
        s.initialisiert_state = 3
        return
    current = s.oeffnen_state
    if current == 1:  # TIPP_OEFFNEN
        if (_rising(s.door_sfhz, s.door_sfhz_old)
                or _rising(s.door_sfha, s.door_sfha_old)):
            s.stable = False
            s.door_mfha_copy = 0
            s.initialisiert_state = 3
            s.oeffnen_state = 0
    elif current == 2:  # MAN_OEFFNEN
        if _rising(s.door_sfhz, s.door_sfhz_old):
            s.stable = False
            s.oeffnen_state = 1
        elif _falling(s.door_sfha, s.door_sfha_old):
            s.stable = False
            s.door_mfha_copy = 0
            s.initialisiert_state = 3
            s.oeffnen_state = 0
    else:
        s.stable = False
        s.oeffnen_state = 2


def _tipp_schliessen(s: WindowLiftState) -> None:
    if (_rising(s.door_sfha, s.door_sfha_old)
            or _rising(s.door_sfhz, s.door_sfhz_old)):
        s.stable = False
        s.door_mfhz_copy = 0
        s.initialisiert_state = 3
        return
    bits = s.bits
    current = s.tipp_schliessen_state
    if current == 1:  # REVERSIEREN2
        bits[Bit.END_REVERS_COPY] = 0
        if bits[Bit.END_REVERS]:
            s.stable = False
            s.door_mfhz_copy = 1
            s.ctrl_inrevers2_copy = 0
            s.tipp_schliessen_state = 2
            s.door_mfha_copy = 0
            bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 1
    elif current == 2:  # TIPP_SCHLIESSEN1
        if bits[Bit.EINKLEMMUNG]:
            s.stable = False
            s.ctrl_inrevers2_copy = 1
            bits[Bit.END_REVERS_COPY] = 1
            s.tipp_schliessen_state = 1
            bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 0
            s.door_mfhz_copy = 0
            s.sc_1781_10 = s.time
            s.door_mfha_copy = 1
    else:
        s.stable = False
        s.tipp_schliessen_state = 2
        bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 1


def _manuell_schliessen(s: WindowLiftState) -> None:
    if _falling(s.door_sfhz, s.door_sfhz_old):
        s.stable = False
        s.door_mfhz_copy = 0
        s.initialisiert_state = 3
        return
    bits = s.bits
    current = s.manuell_schliessen_state
    if current == 1:  # REVERSIEREN1
        bits[Bit.END_REVERS_COPY] = 0
        if bits[Bit.END_REVERS]:
            s.stable = False
            s.ctrl_inrevers1_copy = 0
            s.manuell_schliessen_state = 2
            s.door_mfha_copy = 0
            bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 1
            s.door_mfhz_copy = 1
    elif current == 2:  # MAN_SCHLIESSEN
        if bits[Bit.EINKLEMMUNG]:
            s.stable = False
            s.door_mfhz_copy = 0
            s.ctrl_inrevers1_copy = 1
            bits[Bit.END_REVERS_COPY] = 1
            s.manuell_schliessen_state = 1
            bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 0
            s.sc_1739_10 = s.time
            s.door_mfha_copy = 1
        elif _rising(s.door_sfha, s.door_sfha_old):
            s.stable = False
            s.schliessen_state = 1
            s.manuell_schliessen_state = 0
    else:
        s.stable = False
        s.manuell_schliessen_state = 2
        bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 1
        s.door_mfhz_copy = 1


def _schliessen(s: WindowLiftState) -> None:
    if s.door_position <= 0:
        s.stable = False
        s.door_mfhz_copy = 0
        s.initialisiert_state = 3
        return
    current = s.schliessen_state
    if current == 1:
        _tipp_schliessen(s)
    elif current == 2:
        _manuell_schliessen(s)
    else:
        s.stable = False
        s.schliessen_state = 2
        s.manuell_schliessen_state = 2
        s.bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 1
        s.door_mfhz_copy = 1


def _initialisiert_bereit(s: WindowLiftState) -> None:
    if _rising(s.door_sfhz, s.door_sfhz_old) and s.door_position > 0:
        s.stable = False
        s.initialisiert_state = 2
        s.schliessen_state = 2
        s.manuell_schliessen_state = 2
        s.bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 1
        s.door_mfhz_copy = 1
    elif _rising(s.door_sfha, s.door_sfha_old) and s.door_position < 405:
        s.stable = False
        s.door_mfha_copy = 1
        s.initialisiert_state = 1
        s.oeffnen_state = 2


def _initialisiert(s: WindowLiftState) -> None:
    if (s.ctrl_n > 60 and not s.ctrl_n_old > 60
            and not (s.ctrl_inrevers1 or s.ctrl_inrevers2)):
        s.stable = False
        s.door_mfhz_copy = 0
        s.door_mfha_copy = 0
        s.b_state = 1
        return
    if _rising(s.door_block, s.door_block_old) and s.door_mfha:
        s.stable = False
        s.door_mfha_copy = 0
        s.sc_2375_2 = s.time
        s.b_state = 2
        s.nicht_initialisiert_state = 3
        return
    if _rising(s.door_block, s.door_block_old) and s.door_mfhz:
        s.stable = False
        s.door_mfhz_copy = 0
        s.sc_2352_1 = s.time
        s.b_state = 2
        s.nicht_initialisiert_state = 3
        return
    current = s.initialisiert_state
    if current == 1:
        _oeffnen(s)
    elif current == 2:
        _schliessen(s)
    elif current == 3:
        _initialisiert_bereit(s)
    else:
        s.stable = False
        s.initialisiert_state = 3


def _tuermodul_b(s: WindowLiftState) -> None:
    current = s.b_state
    if current == 1:  # ZAEHLER_WHSP_ZU_HOCH
        if s.ctrl_n == 59 and not s.ctrl_n_old == 59:
            s.stable = False
            s.b_state = 3
            s.initialisiert_state = 3
    elif current == 2:
        _nicht_initialisiert(s)
    elif current == 3:
        _initialisiert(s)
    else:
        s.stable = False
        s.b_state = 2


def _tuermodul_a(s: WindowLiftState) -> None:
    bits = s.bits
    if s.a_state != 1:
        s.stable = False
        s.ctrl_n = 0
        s.a_state = 1
        bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY] = 1
        s.wiederholsperre_state = 1
        return
    bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY] = 0
    if (s.step == 1
            and s.t_wiederholsperre_or_bereit != 0
            and _elapsed(s, s.t_wiederholsperre_or_bereit) == 1
            and (s.door_mfhz or s.door_mfha)):
        s.stable = False
        s.ctrl_n += 1
        s.a_state = 1
        bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY] = 1
        s.wiederholsperre_state = 1
        return
    if s.wiederholsperre_state == 1:  # WDHSP
        if (s.step == 1
                and s.t_wiederholsperre != 0
                and _elapsed(s, s.t_wiederholsperre) == 3
                and not (s.door_mfhz or s.door_mfha)
                and s.ctrl_n > 0):
            s.stable = False
            s.ctrl_n -= 1
            s.wiederholsperre_state = 1
    else:
        s.stable = False
        bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY] = 1
        s.wiederholsperre_state = 1


def tuermodul_step(state: WindowLiftState) -> None:
    """React once in the door module chart (motor control and repeat lock)."""
    s = state
    bits = s.bits
    if (not bits[Bit.ACTIVE_TUERMODUL]
            and bits[Bit.ACTIVE_TUERMODUL_OLD]
            and not bits[Bit.ACTIVE_TUERMODUL_COPY]):
        bits[Bit.ENTERED_WIEDERHOLSPERRE] = 0
        bits[Bit.EXITED_BEREIT] = 0
    if not bits[Bit.ACTIVE_TUERMODUL]:
        return
    if not bits[Bit.ACTIVE_KINDERSICHERUNG]:
        s.kindersicherung_state = 3
    bits[Bit.ACTIVE_KINDERSICHERUNG_COPY] = 0
    if not bits[Bit.ACTIVE_BLOCK_ERKENNUNG]:
        bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] = 0
        s.block_erkennung_state = 1
    bits[Bit.ACTIVE_BLOCK_ERKENNUNG_COPY] = 0
    bits[Bit.ACTIVE_KINDERSICHERUNG_COPY] = 1
    bits[Bit.ACTIVE_BLOCK_ERKENNUNG_COPY] = 1

    _tuermodul_b(s)
    _tuermodul_a(s)

    bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY] = bits[Bit.ENTERED_WIEDERHOLSPERRE]
    bits[Bit.EXITED_BEREIT_COPY] = bits[Bit.EXITED_BEREIT]


# --- anti-trap chart --------------------------------------------------------

def einklemmschutz_step(state: WindowLiftState) -> None:
    """React once in the anti-trap chart watching the safety edge."""
    s = state
    bits = s.bits
    if not bits[Bit.ACTIVE_EINKLEMMSCHUTZ]:
        return
    current = s.einklemmschutz_state
    if current == 1:  # NORMALBETRIEB
        if (_rising(s.door_eks_leiste_aktiv, s.door_eks_leiste_aktiv_old)
                and not (s.door_sfhz and s.door_sfha)):
            s.stable = False
            bits[Bit.EINKLEMMUNG] = 1
            s.einklemmschutz_state = 2
    elif current == 2:  # EINKLEMMUNG
        bits[Bit.EINKLEMMUNG] = 0
        if _falling(s.door_eks_leiste_aktiv, s.door_eks_leiste_aktiv_old):
            s.stable = False
            s.einklemmschutz_state = 1
    else:
        s.stable = False
        s.einklemmschutz_state = 1


# --- block detection chart --------------------------------------------------

def _bewegung(s: WindowLiftState) -> None:
    bits = s.bits
    if (_falling(s.door_mfha, s.door_mfha_old)
            or _falling(s.door_mfhz, s.door_mfhz_old)):
        s.stable = False
        s.block_erkennung_state = 1
        s.bewegung_state = 0
        return
    current = s.bewegung_state
    if current == 1:  # FENSTER_BLOCKIERT
        return
    if current == 2:  # FENSTER_BEWEGT_SICH
        if s.door_i_ein > s.block_ctrl_i_ein_max - 2:
            s.stable = False
            s.door_block_copy = 1
            s.bewegung_state = 1
    elif current == 3:  # EINSCHALTSTROM_MESSEN
        bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] = 0
        if s.block_ctrl_n == 11 and not s.block_ctrl_n_old == 11:
            s.stable = False
            s.bewegung_state = 2
            return
        # The clock is integral, so an interval of 0.002 is never measured.
        if (s.step == 1
                and s.t_einschaltstrom != 0
                and _elapsed(s, s.t_einschaltstrom) == 0.002):
            s.block_ctrl_n += 1
            if s.door_i_ein > s.block_ctrl_i_ein_max:
                s.block_ctrl_i_ein_max = s.door_i_ein
    else:
        s.stable = False
        s.block_ctrl_n = 0
        s.block_ctrl_i_ein_max = 2
        s.bewegung_state = 3
        bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] = 1


def block_erkennung_step(state: WindowLiftState) -> None:
    """React once in the block detection chart watching the motor current."""
    s = state
    bits = s.bits
    if (not bits[Bit.ACTIVE_BLOCK_ERKENNUNG]
            and bits[Bit.ACTIVE_BLOCK_ERKENNUNG_OLD]
            and not bits[Bit.ACTIVE_BLOCK_ERKENNUNG_COPY]):
        bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] = 0
    if not bits[Bit.ACTIVE_BLOCK_ERKENNUNG]:
        return
    current = s.block_erkennung_state
    if current == 1:  # KEINE_BEWEGUNG
        if s.door_i_ein != s.door_i_ein_old and s.door_i_ein > 0:
            s.stable = False
            s.door_block_copy = 0
            s.block_erkennung_state = 2
            s.block_ctrl_n = 0
            s.block_ctrl_i_ein_max = 2
            s.bewegung_state = 3
            bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] = 1
    elif current == 2:
        _bewegung(s)
    else:
        s.stable = False
        s.block_erkennung_state = 1