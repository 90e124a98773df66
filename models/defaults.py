"""Factory calibration models shipped with the dashboard."""

from __future__ import annotations

from models.records import AnalysisModel, CalibrationParams

DEFAULT_MODELS: tuple[AnalysisModel, ...] = (
    AnalysisModel(
        id="cb800",
        name="CB800",
        source_channel="channel_4_mW",
        params=CalibrationParams(
            m_cpo=1.2,
            m_agua=0.05,
            m_arcilla=0.1,
            m_pasta=0.0,
            percent_cpo=98,
            percent_agua=1.5,
            percent_arcilla=0.5,
            zero=-10,
            min_threshold=50,
        ),
    ),
    AnalysisModel(
        id="cb850",
        name="CB850",
        source_channel="channel_5_mW",
        params=CalibrationParams(
            m_cpo=1.15,
            m_agua=0.06,
            m_arcilla=0.12,
            m_pasta=0.0,
            percent_cpo=97,
            percent_agua=1.8,
            percent_arcilla=0.6,
            zero=-12,
            min_threshold=55,
        ),
    ),
    AnalysisModel(
        id="cc750",
        name="CC750",
        source_channel="channel_6_mW",
        params=CalibrationParams(
            m_cpo=1.3,
            m_agua=0.04,
            m_arcilla=0.08,
            m_pasta=1.1,
            percent_cpo=99,
            percent_agua=0.5,
            percent_arcilla=0.2,
            zero=-8,
            min_threshold=45,
        ),
    ),
    AnalysisModel(
        id="cc800",
        name="CC800",
        source_channel="channel_7_mW",
        params=CalibrationParams(
            m_cpo=1.25,
            m_agua=0.05,
            m_arcilla=0.09,
            m_pasta=1.2,
            percent_cpo=98.5,
            percent_agua=1.0,
            percent_arcilla=0.3,
            zero=-9,
            min_threshold=48,
        ),
    ),
    AnalysisModel(
        id="cc850",
        name="CC850",
        source_channel="channel_8_mW",
        params=CalibrationParams(
            m_cpo=1.22,
            m_agua=0.055,
            m_arcilla=0.11,
            m_pasta=1.15,
            percent_cpo=97.5,
            percent_agua=1.2,
            percent_arcilla=0.4,
            zero=-11,
            min_threshold=52,
        ),
    ),
)
