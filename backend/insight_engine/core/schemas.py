from datetime import datetime
from pydantic import BaseModel, Field, computed_field, field_validator
from typing import List, Optional, Any, Dict, Union, Literal

ColumnType = Literal['numeric', 'date', 'categorical', 'text']
InsightType = Literal['trend', 'anomaly', 'recommendation', 'summary', 'pattern', 'correlation', 'outlier']
Confidence = Literal['High', 'Medium', 'Low']
Severity = Literal['info', 'warning', 'critical']
Strength = Literal['Strong', 'Moderate', 'Weak', 'None']


def correlation_strength(r: float) -> Strength:
    """Bucket a Pearson coefficient by magnitude."""
    magnitude = abs(r)
    if magnitude >= 0.7:
        return 'Strong'
    if magnitude >= 0.4:
        return 'Moderate'
    if magnitude >= 0.2:
        return 'Weak'
    return 'None'


class Dataset(BaseModel):
    fields: List[str]
    rows: List[Dict[str, Any]] = []

    @field_validator('fields')
    @classmethod
    def fields_must_be_unique(cls, v: List[str]) -> List[str]:
        seen = set()
        duplicates = [f for f in v if f in seen or seen.add(f)]
        if duplicates:
            raise ValueError(f"duplicate field names: {sorted(set(duplicates))}")
        return v

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> "Dataset":
        """Build a dataset whose fields are the record keys in first-seen order."""
        fields: Dict[str, None] = {}
        for record in records:
            for key in record:
                fields.setdefault(str(key), None)
        return cls(fields=list(fields), rows=records)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def is_empty(self) -> bool:
        return not self.rows or not self.fields

    def column(self, field: str) -> List[Any]:
        return [row.get(field) for row in self.rows]

    def head(self, n: int) -> "Dataset":
        return Dataset(fields=list(self.fields), rows=self.rows[:n])


class ColumnInfo(BaseModel):
    name: str
    type: ColumnType
    unique_count: int
    null_count: int
    sample: List[Any]  # first 5 non-null values

    @property
    def is_date(self) -> bool:
        return self.type == 'date'

    @property
    def is_numeric(self) -> bool:
        return self.type == 'numeric'


class Insight(BaseModel):
    id: str
    type: InsightType
    title: str
    description: str
    confidence: Confidence
    category: str
    value: Optional[Union[int, float, str]] = None
    change: Optional[float] = None  # percent
    severity: Optional[Severity] = None


class DescriptiveStats(BaseModel):
    count: int
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    sum: float


class CorrelationResult(BaseModel):
    field1: str
    field2: str
    correlation: float = Field(ge=-1.0, le=1.0)

    @computed_field
    @property
    def strength(self) -> Strength:
        return correlation_strength(self.correlation)


class OutlierPoint(BaseModel):
    index: int  # original row index
    value: float


class OutlierResult(BaseModel):
    field: str
    outliers: List[OutlierPoint]
    method: Literal['IQR'] = 'IQR'
    threshold: float = 1.5


class AnalyticsResult(BaseModel):
    columns: List[ColumnInfo] = []
    insights: List[Insight] = []
    correlations: List[CorrelationResult] = []  # strength != 'None'
    outliers: List[OutlierResult] = []
    recommended_x_axis: str = ""
    recommended_y_axis: str = ""
    date_column: Optional[str] = None
    numeric_columns: List[str] = []
    categorical_columns: List[str] = []


class ReportChartDraft(BaseModel):
    chart_type: str
    chart_label: str = "Chart"
    x_axis: str
    y_axis: str
    title: str
    image: Optional[str] = None  # data URI or bare base64 PNG
    data_slice: List[Dict[str, Any]] = []
    stats: Optional[DescriptiveStats] = None
    insights: List[Insight] = []
    correlations: List[CorrelationResult] = []


class ReportChart(ReportChartDraft):
    id: str
    added_at: datetime


class ReportDocument(BaseModel):
    source_file_name: str
    source_file_type: str
    total_rows: int = Field(ge=0)
    charts: List[ReportChart] = []
    created_at: datetime
    updated_at: datetime


class ChatMessage(BaseModel):
    role: Literal['user', 'assistant']
    content: str
    timestamp: Optional[str] = None


class ReportOptions(BaseModel):
    include_insights: bool = False
    include_chat: bool = False
    include_quick_stats: bool = True
    insights: List[Insight] = []
    chat_messages: List[ChatMessage] = []
    generated_at: Optional[datetime] = None
