"""Standalone HTML pages for table and field lineage.

The table page lays the vis-network document out hierarchically on the
node levels. The field page draws backward lineage left-to-right and
forward lineage right-to-left with dagre-d3, showing root fields first and
expanding a field's subtree on click.
"""

from __future__ import annotations

from typing import Any

from jinja2 import DictLoader, Environment, select_autoescape

from metalineage.base import SchemaLineage, TableLineage
from metalineage.encoding import encode_for_script
from metalineage.visualization.protocols import RenderConfig

TABLE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <script src="https://unpkg.com/vis-network/standalone/umd/vis-network.min.js"></script>
  <style>
    body { margin: 0; background: {{ colors.background }}; color: {{ colors.font }}; font-family: sans-serif; }
    header { padding: 12px 16px; }
    #lineage { width: 100%; height: {{ height }}px; }
  </style>
</head>
<body>
  <header>
    <h1>{{ title }}</h1>
    <p>{{ target }}: {{ node_count }} tables, {{ edge_count }} dependencies</p>
  </header>
  <div id="lineage"></div>
  <script>
    var data = {{ document_json | safe }};
    var highlighted = {{ highlight_json | safe }};
    data.nodes.forEach(function (node) {
      if (highlighted.indexOf(node.fqdn) !== -1) {
        node.color = "{{ colors.highlight }}";
      }
    });
    new vis.Network(document.getElementById("lineage"), {
      nodes: new vis.DataSet(data.nodes),
      edges: new vis.DataSet(data.edges)
    }, {
      layout: { hierarchical: { direction: "{{ direction }}", sortMethod: "directed" } },
      groups: { "{{ group }}": { shape: "box", color: "{{ colors.node }}", font: { color: "#FFFFFF" } } },
      edges: { color: "{{ colors.edge }}" },
      physics: false
    });
  </script>
</body>
</html>
"""

SCHEMA_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <script src="https://d3js.org/d3.v3.min.js"></script>
  <script src="https://unpkg.com/dagre-d3@0.4/dist/dagre-d3.min.js"></script>
  <style>
    body { margin: 0; background: {{ colors.background }}; color: {{ colors.font }}; font-family: sans-serif; }
    section { padding: 12px 16px; }
    .node rect { fill: {{ colors.node }}; }
    .node.leaf rect { fill: {{ colors.highlight }}; }
    .edgePath path { stroke: {{ colors.edge }}; fill: none; }
  </style>
</head>
<body>
  <section><h1>{{ title }}</h1><p>{{ table }}</p></section>
  <section><h2>Backward lineage</h2><div id="backward-lineage"></div></section>
  <section><h2>Forward lineage</h2><div id="forward-lineage"></div></section>
  <script>
    function drawLineage(selector, direction, edges) {
      var svg = d3.select(selector).append("svg");
      var full = new dagreD3.graphlib.Graph().setGraph({});
      var parents = {};
      var drawn = new dagreD3.graphlib.Graph({compound: true}).setGraph({rankdir: direction});
      var render = new dagreD3.render();
      edges.forEach(function (edge) {
        full.setEdge(edge.from.id, edge.to.id);
        [edge.from, edge.to].forEach(function (node) {
          full.setNode(node.id, {label: node.label});
          parents[node.id] = node.parent;
        });
      });
      function place(id) {
        drawn.setNode(id, full.node(id));
        drawn.setNode(parents[id], {label: parents[id], clusterLabelPos: "top"});
        drawn.setParent(id, parents[id]);
      }
      function expand(id) {
        full.outEdges(id).forEach(function (edge) {
          place(edge.w);
          drawn.setEdge(edge.v, edge.w, {});
          if (full.successors(edge.w).length === 0) { drawn.node(edge.w).class = "leaf"; }
          expand(edge.w);
        });
      }
      function redraw() {
        render(svg, drawn);
        var box = svg.node().getBBox();
        svg.attr("width", box.width + 20).attr("height", box.height + 20);
        svg.selectAll(".node").on("click", function (id) { expand(id); redraw(); });
      }
      full.sources().forEach(place);
      redraw();
    }
    var lineage = {{ lineage_json | safe }};
    drawLineage("#backward-lineage", "LR", lineage.backwardEdges);
    drawLineage("#forward-lineage", "RL", lineage.forwardEdges);
  </script>
</body>
</html>
"""

_environment: Environment | None = None


def get_environment() -> Environment:
    """Get the shared jinja2 environment holding the page templates."""
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=DictLoader({
                "table_lineage.html": TABLE_TEMPLATE,
                "schema_lineage.html": SCHEMA_TEMPLATE,
            }),
            autoescape=select_autoescape(["html"]),
        )
    return _environment


def render_table_page(
    lineage: TableLineage,
    document: dict[str, Any],
    config: RenderConfig | None = None,
) -> str:
    """Render a vis-network page for a rendered table lineage document."""
    config = config or RenderConfig()
    template = get_environment().get_template("table_lineage.html")
    return template.render(
        title=config.title,
        target=lineage.target,
        node_count=lineage.node_count,
        edge_count=lineage.edge_count,
        document_json=encode_for_script(document),
        highlight_json=encode_for_script(list(config.highlight_nodes)),
        direction=config.direction,
        group=config.node_group,
        colors=config.colors,
        height=config.height,
    )


def render_schema_page(lineage: SchemaLineage, config: RenderConfig | None = None) -> str:
    """Render a dagre-d3 page for a table's field lineage."""
    config = config or RenderConfig()
    template = get_environment().get_template("schema_lineage.html")
    return template.render(
        title=config.title,
        table=lineage.table,
        lineage_json=encode_for_script(lineage.to_dict()),
        colors=config.colors,
    )
