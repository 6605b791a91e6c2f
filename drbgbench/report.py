from __future__ import annotations
import html
import json
import logging
from pathlib import Path

from .bench import BenchmarkResult

logger = logging.getLogger(__name__)

COLORS = {
    "CTR-DRBG": "#2ecc71",
    "Hash-DRBG": "#3498db",
    "HMAC-DRBG": "#e67e22",
}
FALLBACK_COLOR = "#95a5a6"


def format_table(results: list[BenchmarkResult]) -> str:
    head = "{:<10} {:>10} {:>14} {:>10} {:>10} {:>11}".format(
        "DRBG", "Bits", "Time (us)", "Zeros", "Ones", "Bias (%)"
    )
    line = "-" * len(head)
    rows = [line, head, line]
    for r in results:
        rows.append("{:<10} {:>10} {:>14.2f} {:>10} {:>10} {:>11.6f}".format(
            r.drbg_name, r.num_bits, r.generation_time_us,
            r.count_zeros, r.count_ones, r.bias * 100,
        ))
    rows.append(line)
    return "\n".join(rows)


_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>DRBG Benchmark Results</title>
<script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
<style>
  body {{ font-family: 'Segoe UI', Tahoma, sans-serif; background: #1a1a2e; color: #eee; padding: 20px; }}
  .container {{ max-width: 1400px; margin: 0 auto; }}
  h1, h2 {{ text-align: center; }}
  .charts-grid {{ display: grid; grid-template-columns: repeat(2, 1fr); gap: 20px; }}
  .chart-container {{ background: rgba(255,255,255,0.05); border-radius: 12px; padding: 16px; }}
  canvas {{ max-height: 300px; }}
  table {{ width: 100%; border-collapse: collapse; margin-top: 20px; }}
  th, td {{ padding: 10px; text-align: center; border-bottom: 1px solid rgba(255,255,255,0.1); }}
  th {{ background: rgba(0,210,255,0.2); }}
</style>
</head>
<body>
<div class="container">
<h1>DRBG Benchmark Results</h1>
<div class="charts-grid">
  <div class="chart-container"><h2>Generation Time (log scale)</h2><canvas id="timeChart"></canvas></div>
  <div class="chart-container"><h2>Throughput (bits/us)</h2><canvas id="throughputChart"></canvas></div>
  <div class="chart-container"><h2>Bit Distribution Bias</h2><canvas id="biasChart"></canvas></div>
  <div class="chart-container"><h2>Memory Footprint</h2><canvas id="memoryChart"></canvas></div>
</div>
<h2>Detailed Results</h2>
<table>
<thead><tr><th>DRBG</th><th>Bits Generated</th><th>Time (us)</th><th>Zeros</th><th>Ones</th><th>Bias (%)</th><th>Throughput (bits/us)</th></tr></thead>
<tbody>
{rows}
</tbody>
</table>
</div>
<script>
const colors = {colors};
const results = {data};
const names = [...new Set(results.map(r => r.name))];
const bitSizes = [...new Set(results.map(r => r.bits))].sort((a, b) => a - b);
function series(key, scale) {{
  return names.map(name => ({{
    label: name,
    data: bitSizes.map(bits => {{
      const r = results.find(x => x.name === name && x.bits === bits);
      return r ? r[key] * (scale || 1) : null;
    }}),
    borderColor: colors[name] || '{fallback}',
    tension: 0.3
  }}));
}}
const labels = bitSizes.map(b => b.toExponential(0));
new Chart(document.getElementById('timeChart'), {{
  type: 'line', data: {{ labels, datasets: series('time') }},
  options: {{ scales: {{ y: {{ type: 'logarithmic', title: {{ display: true, text: 'Time (us)' }} }} }} }}
}});
new Chart(document.getElementById('throughputChart'), {{
  type: 'line', data: {{ labels, datasets: series('throughput') }}
}});
new Chart(document.getElementById('biasChart'), {{
  type: 'line', data: {{ labels, datasets: series('bias', 100) }},
  options: {{ scales: {{ y: {{ title: {{ display: true, text: 'Bias (%)' }} }} }} }}
}});
new Chart(document.getElementById('memoryChart'), {{
  type: 'bar',
  data: {{
    labels: names,
    datasets: [{{
      label: 'State Size (bytes)',
      data: names.map(name => results.find(x => x.name === name).stateSize),
      backgroundColor: names.map(name => colors[name] || '{fallback}')
    }}]
  }}
}});
</script>
</body>
</html>
"""


def _table_row(r: BenchmarkResult) -> str:
    cells = [
        html.escape(r.drbg_name),
        str(r.num_bits),
        f"{r.generation_time_us:.2f}",
        str(r.count_zeros),
        str(r.count_ones),
        f"{r.bias * 100:.4f}",
        f"{r.bits_per_microsecond:.2f}",
    ]
    return "<tr>" + "".join(f"<td>{c}</td>" for c in cells) + "</tr>"


def render_html(results: list[BenchmarkResult]) -> str:
    data = [
        {
            "name": r.drbg_name,
            "bits": r.num_bits,
            "time": round(r.generation_time_us, 2),
            "stateSize": r.state_size,
            "bias": round(r.bias, 8),
            "throughput": round(r.bits_per_microsecond, 2),
        }
        for r in results
    ]
    # "</" cannot appear inside the inline script
    payload = json.dumps(data).replace("</", "<\\/")
    return _PAGE.format(
        rows="\n".join(_table_row(r) for r in results),
        colors=json.dumps(COLORS),
        data=payload,
        fallback=FALLBACK_COLOR,
    )


def write_html(results: list[BenchmarkResult], path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html(results), encoding="utf-8")
    logger.info("HTML visualization saved to %s", path)
    return path
