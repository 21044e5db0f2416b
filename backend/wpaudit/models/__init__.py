from wpaudit.models.observations import (
    HOMEPAGE_PATHS,
    SeoData,
    ImageFormats,
    PerformanceData,
    SecurityData,
    FieldPerformance,
    PageObservation,
    ModernizationData,
    WordPressDetection,
    find_homepage,
)
from wpaudit.models.analysis import (
    HtmlSizeCategory,
    ScriptLoadCategory,
    ImageOptimization,
    CachingStatus,
    VitalStatus,
    CoverageQuality,
    H1Quality,
    HttpsStatus,
    HeadersCoverage,
    VersionExposure,
    SecurityPosture,
    RestApiStatus,
    PermalinkModernity,
    CdnUsage,
    HeadlessReadiness,
    Rating,
    CoreWebVitals,
    PerformanceAnalysis,
    SeoAnalysis,
    SecurityAnalysis,
    ModernizationAnalysis,
    CategoryAnalyses,
    ScoringResult,
)
