#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Molecular Motion Canvas
================================================================================

Project:        Molecular Motion Canvas
Description:    Real-time 2D kinetic gas of H₂, N₂ and CO₂ molecules with live
                temperature, population and size controls

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

This package implements a frame-driven kinetic gas simulation featuring:
- Maxwell-Boltzmann velocity sampling (Box-Muller)
- Elastic molecule-molecule and molecule-wall collisions (Numba kernels)
- Live re-parameterization without restarting the gas
- Rolling-window pressure and theoretical speed statistics

Modules:
    - physics: Constants, species, thermal sampler and collision kernels
    - simulation: Particle store, integrator and host lifecycle
    - thermodynamics: Pressure window and kinetic theory observables
    - visualization: Matplotlib rendering of frame snapshots
    - utils: Logging and configuration loading
"""

__version__ = "1.0.0"
__author__ = "Ryan Kamp"
