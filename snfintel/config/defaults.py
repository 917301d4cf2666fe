DEFAULT_CONFIG = {
    # -----------------------------
    # ALERT THRESHOLDS
    # -----------------------------
    # Units follow the KPI: percent for *_pct, dollars for *_ppd,
    # hours for nursing_hprd.
    "alerts": {
        "operating_margin": 5.0,    # alert below
        "contract_labor": 15.0,     # alert above
        "skilled_mix": 15.0,        # alert below
        "occupancy": 85.0,          # alert below
        "revenue_ppd": 380.0,       # alert below
        "expense_ppd": 400.0,       # alert above
        "nursing_hprd": 3.5,        # alert below
        "agency_nursing": 20.0,     # alert above
    },

    # -----------------------------
    # NARRATIVE
    # -----------------------------
    "narrative": {
        "personality": "friendly",
        "focus_areas": ["margins", "labor", "revenue"],
        # Illustrative content on data-unavailable paths. OFF until the
        # product owner decides whether it should ship.
        "sample_fallbacks": False,
    },

    # -----------------------------
    # INDUSTRY BENCHMARKS (SNF)
    # -----------------------------
    "benchmarks": {
        "operating_margin": 8.0,
        "skilled_mix": 20.0,
        "revenue_ppd": 400.0,
        "expense_ppd": 350.0,
        "contract_labor": 10.0,
    },

    # -----------------------------
    # METADATA (OPTIONAL)
    # -----------------------------
    "metadata": {
        "framework": "SNF Intel",
        "version": "v1.2",
    },
}
