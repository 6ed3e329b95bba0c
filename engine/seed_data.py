"""
Default formula library and physical constants.

Constant values are CODATA 2018 exact or recommended values.
"""

SEED_FORMULAS = [
    # --- Basic Electronics ---
    {"id": "ohms-law-voltage", "name": "Ohm's Law (Voltage)", "expression": "I * R",
     "description": "Calculates voltage from current and resistance: V = I × R",
     "category": "Basic Electronics", "variables": ["I", "R"]},

    {"id": "ohms-law-current", "name": "Ohm's Law (Current)", "expression": "V / R",
     "description": "Calculates current from voltage and resistance: I = V / R",
     "category": "Basic Electronics", "variables": ["V", "R"]},

    {"id": "voltage-divider", "name": "Voltage Divider", "expression": "Vin * R2 / (R1 + R2)",
     "description": "Output of an unloaded resistive divider: Vout = Vin × R2 / (R1 + R2)",
     "category": "Basic Electronics", "variables": ["Vin", "R1", "R2"]},

    # --- Power Calculations ---
    {"id": "power-vi", "name": "Power (Voltage × Current)", "expression": "V * I",
     "description": "Calculates power from voltage and current: P = V × I",
     "category": "Power Calculations", "variables": ["V", "I"]},

    {"id": "power-i2r", "name": "Power (Current² × Resistance)", "expression": "I^2 * R",
     "description": "Power dissipated in a resistor: P = I² × R",
     "category": "Power Calculations", "variables": ["I", "R"]},

    # --- AC Analysis ---
    {"id": "rc-time-constant", "name": "RC Time Constant", "expression": "R * C",
     "description": "Time constant for RC circuit: τ = R × C",
     "category": "AC Analysis", "variables": ["R", "C"]},

    {"id": "capacitive-reactance", "name": "Capacitive Reactance", "expression": "1 / (2 * pi * f * C)",
     "description": "Reactance of a capacitor: Xc = 1 / (2πfC)",
     "category": "AC Analysis", "variables": ["f", "C"]},

    {"id": "inductive-reactance", "name": "Inductive Reactance", "expression": "2 * pi * f * L",
     "description": "Reactance of an inductor: XL = 2πfL",
     "category": "AC Analysis", "variables": ["f", "L"]},

    {"id": "lc-resonance", "name": "LC Resonant Frequency", "expression": "1 / (2 * pi * sqrt(L * C))",
     "description": "Resonant frequency of an LC tank: f0 = 1 / (2π√(LC))",
     "category": "AC Analysis", "variables": ["L", "C"]},

    # --- Electromagnetics ---
    {"id": "wavelength", "name": "Wavelength", "expression": "c / f",
     "description": "Free-space wavelength: λ = c / f",
     "category": "Electromagnetics", "variables": ["c", "f"]},

    {"id": "thermal-voltage", "name": "Thermal Voltage", "expression": "k * T / e",
     "description": "Thermal voltage of a p-n junction: VT = kT / e",
     "category": "Semiconductors", "variables": ["k", "T", "e"]},
]

SEED_CONSTANTS = [
    {"id": "speed-of-light", "name": "Speed of Light", "symbol": "c",
     "value": 299792458.0, "unit": "m/s",
     "description": "Speed of electromagnetic radiation in vacuum"},

    {"id": "elementary-charge", "name": "Elementary Charge", "symbol": "e",
     "value": 1.602176634e-19, "unit": "C",
     "description": "Electric charge of a single proton"},

    {"id": "boltzmann", "name": "Boltzmann Constant", "symbol": "k",
     "value": 1.380649e-23, "unit": "J/K",
     "description": "Relates particle kinetic energy to temperature"},

    {"id": "vacuum-permittivity", "name": "Vacuum Permittivity", "symbol": "eps0",
     "value": 8.8541878128e-12, "unit": "F/m",
     "description": "Electric constant ε0"},

    {"id": "vacuum-permeability", "name": "Vacuum Permeability", "symbol": "mu0",
     "value": 1.25663706212e-6, "unit": "H/m",
     "description": "Magnetic constant μ0"},
]
