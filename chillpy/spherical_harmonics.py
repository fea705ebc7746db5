# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

import numpy as np
import taichi as ti


_METHODS = ("general", "table")


def _check_method(l, method):
    """Validate the evaluator name and return 1 for the lookup table, 0 otherwise."""
    if method not in _METHODS:
        raise ValueError(f"Unrecognized method {method}, please choose in {_METHODS}.")
    if l < 0:
        raise ValueError("l should be a non-negative integer.")
    if method == "table" and l not in (3, 6):
        raise ValueError("The lookup table only supports l = 3 and l = 6.")
    return int(method == "table")


@ti.func
def _associated_legendre(l: int, m: int, x: float) -> float:
    """Associated Legendre polynomial P_l^m(x) for m >= 0, with the Condon-Shortley phase."""
    res = ti.f64(0.0)
    if l >= m:
        p, pm1, pm2 = ti.f64(1.0), ti.f64(0.0), ti.f64(0.0)
        if m != 0:
            sqx = ti.sqrt(ti.max(1.0 - x * x, 0.0))
            for i in range(1, m + 1):
                p *= -(2 * i - 1) * sqx
        for i in range(m + 1, l + 1):
            pm2 = pm1
            pm1 = p
            p = ((2 * i - 1) * x * pm1 - (i + m - 1) * pm2) / (i - m)
        res = p
    return res


@ti.func
def _ylm_general(l: int, m: int, theta: float, phi: float):
    mabs = ti.abs(m)
    prefactor = ti.f64(1.0)
    for i in range(l - mabs + 1, l + mabs + 1):
        prefactor *= i
    amplitude = ti.sqrt(
        (2 * l + 1) / (4 * ti.math.pi * prefactor)
    ) * _associated_legendre(l, mabs, ti.cos(theta))
    re = amplitude * ti.cos(mabs * phi)
    im = amplitude * ti.sin(mabs * phi)
    # Y_l^{-m} = (-1)^m conj(Y_l^m)
    if m < 0:
        im = -im
        if mabs % 2 == 1:
            re = -re
            im = -im
    return ti.Vector([re, im], ti.f64)


@ti.func
def _table_amplitude(l: int, mabs: int, theta: float) -> float:
    """Closed-form amplitude of Y_l^{-|m|} for l = 3 and l = 6."""
    c = ti.cos(theta)
    s = ti.sin(theta)
    pi = ti.math.pi
    res = ti.f64(0.0)
    if l == 3:
        if mabs == 0:
            res = 0.25 * ti.sqrt(7.0 / pi) * (5.0 * c**3 - 3.0 * c)
        elif mabs == 1:
            res = 0.125 * ti.sqrt(21.0 / pi) * s * (5.0 * c**2 - 1.0)
        elif mabs == 2:
            res = 0.25 * ti.sqrt(105.0 / (2.0 * pi)) * s**2 * c
        elif mabs == 3:
            res = 0.125 * ti.sqrt(35.0 / pi) * s**3
    elif l == 6:
        if mabs == 0:
            res = (
                (1.0 / 32.0)
                * ti.sqrt(13.0 / pi)
                * (231.0 * c**6 - 315.0 * c**4 + 105.0 * c**2 - 5.0)
            )
        elif mabs == 1:
            res = (
                (1.0 / 16.0)
                * ti.sqrt(273.0 / (2.0 * pi))
                * s
                * (33.0 * c**5 - 30.0 * c**3 + 5.0 * c)
            )
        elif mabs == 2:
            res = (
                (1.0 / 64.0)
                * ti.sqrt(1365.0 / pi)
                * s**2
                * (33.0 * c**4 - 18.0 * c**2 + 1.0)
            )
        elif mabs == 3:
            res = (1.0 / 32.0) * ti.sqrt(1365.0 / pi) * s**3 * (11.0 * c**3 - 3.0 * c)
        elif mabs == 4:
            res = (3.0 / 32.0) * ti.sqrt(91.0 / (2.0 * pi)) * s**4 * (11.0 * c**2 - 1.0)
        elif mabs == 5:
            res = (3.0 / 32.0) * ti.sqrt(1001.0 / pi) * s**5 * c
        elif mabs == 6:
            res = (1.0 / 64.0) * ti.sqrt(3003.0 / pi) * s**6
    return res


@ti.func
def _ylm_table(l: int, m: int, theta: float, phi: float):
    mabs = ti.abs(m)
    amplitude = _table_amplitude(l, mabs, theta)
    if m > 0 and mabs % 2 == 1:
        amplitude = -amplitude
    re = amplitude * ti.cos(mabs * phi)
    im = amplitude * ti.sin(mabs * phi)
    if m < 0:
        im = -im
    return ti.Vector([re, im], ti.f64)


@ti.func
def _ylm(l: int, m: int, theta: float, phi: float, use_table: int):
    """Real and imaginary part of Y_l^m(theta, phi)."""
    res = ti.Vector([0.0, 0.0], ti.f64)
    if use_table == 1:
        res = _ylm_table(l, m, theta, phi)
    else:
        res = _ylm_general(l, m, theta, phi)
    return res


@ti.kernel
def _evaluate(
    l: int,
    use_table: int,
    theta: ti.types.ndarray(),
    phi: ti.types.ndarray(),
    ylm_r: ti.types.ndarray(),
    ylm_i: ti.types.ndarray(),
):
    for n in range(theta.shape[0]):
        for k in range(2 * l + 1):
            y = _ylm(l, k - l, theta[n], phi[n], use_table)
            ylm_r[n, k] = y[0]
            ylm_i[n, k] = y[1]


def ylm(l, theta, phi, method="general"):
    """Evaluate the spherical harmonics :math:`Y_{\\ell}^{m}` for all :math:`m \\in [-\\ell, \\ell]`.

    The Condon-Shortley phase is included, so :math:`Y_{\\ell}^{-m} = (-1)^m \\bar{Y}_{\\ell}^{m}`.
    Two evaluators are provided and they agree to machine precision:

    - "general": associated Legendre recursion, any non-negative :math:`\\ell`.
    - "table": closed-form expressions, only :math:`\\ell = 3` and :math:`\\ell = 6`.

    Args:
        l (int): degree of the spherical harmonics.
        theta (float | np.ndarray): polar angle in [0, :math:`\\pi`].
        phi (float | np.ndarray): azimuthal angle.
        method (str, optional): evaluator, choose in ['general', 'table']. Defaults to "general".

    Returns:
        np.ndarray: (:math:`N, 2\\ell+1`) complex array, column :math:`m+\\ell` holds :math:`Y_{\\ell}^{m}`.

    Examples:
        >>> import chillpy as cp

        >>> cp.init()

        >>> cp.ylm(3, [0.0], [0.0])[0, 3] # sqrt(7/(4pi)) = 0.746352665180231
    """
    use_table = _check_method(l, method)
    theta = np.ascontiguousarray(np.atleast_1d(theta), dtype=np.float64)
    phi = np.ascontiguousarray(np.atleast_1d(phi), dtype=np.float64)
    assert theta.shape == phi.shape, "theta and phi should have the same shape."
    assert theta.ndim == 1, "theta and phi should be 1-D arrays."
    ylm_r = np.zeros((theta.shape[0], 2 * l + 1))
    ylm_i = np.zeros_like(ylm_r)
    if theta.shape[0] > 0:
        _evaluate(l, use_table, theta, phi, ylm_r, ylm_i)
    return ylm_r + 1j * ylm_i


if __name__ == "__main__":
    ti.init(ti.cpu, default_fp=ti.f64)
    theta = np.array([0.0, np.pi / 2, np.pi, 0.3, 1.1])
    phi = np.array([0.0, np.pi / 4, np.pi, 2.0, -0.7])
    for l in [3, 6]:
        diff = np.abs(ylm(l, theta, phi, "general") - ylm(l, theta, phi, "table"))
        print(f"l = {l}, max difference between evaluators: {diff.max()}")
