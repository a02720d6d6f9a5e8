"""
Logging Configuration and Solver Convergence Reporting.

All modules obtain their logger through ``get_logger(__name__)``. Iterative
solvers hand their ``ConvergenceReport`` to ``log_convergence``, which is
the single place where the convergence policy is applied: a converged
solve is logged at DEBUG, a capped solve is logged as a warning and
either emits a ``ConvergenceWarning`` or, in strict mode, raises.
"""

import logging
import sys
import warnings

from common.exceptions import ConvergenceError, ConvergenceWarning
from common.types import ConvergenceReport


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the geodesy core.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def log_convergence(
    logger: logging.Logger,
    report: ConvergenceReport,
    strict: bool = False
) -> ConvergenceReport:
    """Record the outcome of an iterative solve.

    Parameters
    ----------
    logger : logging.Logger
        Logger of the calling module.
    report : ConvergenceReport
        The solver outcome.
    strict : bool
        Raise instead of warning when the solver did not converge.

    Returns
    -------
    ConvergenceReport
        The same report, for chaining.

    Raises
    ------
    ConvergenceError
        If ``strict`` and the solver did not converge.
    """
    status = "PASS" if report.converged else "CAPPED"
    log_msg = (
        f"SOLVER | {report.solver} | {status} | iterations={report.iterations} "
        f"residual={report.residual:.3e} (tolerance={report.tolerance:.3e})"
    )

    if report.converged:
        logger.debug(log_msg)
        return report

    if strict:
        logger.error(log_msg)
        raise ConvergenceError(report.solver, report)

    logger.warning(log_msg)
    warnings.warn(
        f"{report.solver} stopped after {report.iterations} iterations with "
        f"residual {report.residual:.3e}; returning best estimate",
        ConvergenceWarning,
        stacklevel=3
    )
    return report
