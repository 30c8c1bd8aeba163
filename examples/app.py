import json

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from dynamicmass.dr import to_bar_dataframe, to_node_dataframe, to_structure_json, velocity_rms
from dynamicmass.editor_state import (
    add_spring,
    delete_spring,
    edit_spring,
    inputs_from_json,
    inputs_to_json,
    nodes_from_springs,
    toggle_support,
)
from dynamicmass.logging_config import setup_logging
from dynamicmass.presets import build_cable_net, build_hanging_chain, build_tripod
from dynamicmass.session import MessageLevel, RelaxationInputs, Session

setup_logging()

st.title("DynamicMass Form Finding")

uploaded = st.file_uploader("Load inputs JSON", type="json")
default_idx = 3 if uploaded else 0
preset = st.selectbox("Preset", ["Chain", "Cable net", "Tripod", "Custom", "Editor"], index=default_idx)

if preset == "Chain":
    n = st.slider("segments", 2, 40, 10)
    span = st.slider("span", 0.5, 5.0, 1.0, step=0.1)
    inputs = build_hanging_chain(n=n, span=span)
elif preset == "Cable net":
    nx = st.slider("nx", 2, 12, 5)
    ny = st.slider("ny", 2, 12, 5)
    edges = st.checkbox("Support edges", value=False)
    inputs = build_cable_net(nx, ny, support_edges=edges)
elif preset == "Tripod":
    radius = st.slider("radius", 0.5, 2.0, 1.0, step=0.1)
    height = st.slider("height", 0.5, 2.0, 1.0, step=0.1)
    inputs = build_tripod(radius=radius, height=height)
elif preset == "Editor":
    st.header("Spring Editor")
    springs = st.session_state.setdefault("springs", [])
    supports = st.session_state.setdefault("supports", [])
    selected = st.session_state.setdefault("selected_spring", 0)

    col_add, col_del = st.columns(2)
    if col_add.button("Add spring"):
        springs = add_spring(springs, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        st.session_state["springs"] = springs
        st.session_state["selected_spring"] = len(springs) - 1
    if springs and col_del.button("Delete spring"):
        springs = delete_spring(springs, min(selected, len(springs) - 1))
        st.session_state["springs"] = springs
        st.session_state["selected_spring"] = max(0, len(springs) - 1)

    if not springs:
        st.info("Add a spring to start editing.")
        st.stop()

    idx = st.selectbox(
        "Select spring", list(range(len(springs))), index=min(st.session_state["selected_spring"], len(springs) - 1)
    )
    st.session_state["selected_spring"] = idx
    a, b = springs[idx]
    ax = st.slider("Ax", -5.0, 5.0, float(a[0]), step=0.05)
    ay = st.slider("Ay", -5.0, 5.0, float(a[1]), step=0.05)
    az = st.slider("Az", -5.0, 5.0, float(a[2]), step=0.05)
    bx = st.slider("Bx", -5.0, 5.0, float(b[0]), step=0.05)
    by = st.slider("By", -5.0, 5.0, float(b[1]), step=0.05)
    bz = st.slider("Bz", -5.0, 5.0, float(b[2]), step=0.05)
    springs = edit_spring(springs, idx, (ax, ay, az), (bx, by, bz))
    st.session_state["springs"] = springs

    nodes = nodes_from_springs(springs)
    node_idx = st.selectbox("Node", list(range(len(nodes))), format_func=lambda k: str(nodes[k]))
    if st.button("Toggle support"):
        supports = toggle_support(supports, nodes[node_idx])
        st.session_state["supports"] = supports
    st.caption(f"{len(nodes)} nodes, {len(supports)} supports. Press Reset to rebuild after editing.")
    inputs = RelaxationInputs(nodes=nodes, springs=springs, supports=supports)
else:
    if uploaded is None:
        st.error("Upload a JSON for Custom preset")
        st.stop()
    inputs = inputs_from_json(uploaded.getvalue().decode("utf-8"))

stiffness = st.slider("stiffness", 0.1, 200.0, float(inputs.stiffnesses[0]), step=0.1)
mass_density = st.slider("mass density", 0.01, 5.0, float(inputs.mass_density[0]), step=0.01)
mass_type = st.radio(
    "Mass type", [0, 1, 2], index=int(inputs.mass_type), horizontal=True,
    format_func=lambda k: ["Constant", "Length", "Area"][k],
)
if len(inputs.stiffnesses) == 1:
    inputs.stiffnesses = [stiffness]
if len(inputs.mass_density) == 1:
    inputs.mass_density = [mass_density]
inputs.mass_type = mass_type

# live globals
inputs.damping = st.slider("damping", 0.0, 1.0, 0.95, step=0.01)
inputs.gravity = st.slider("gravity", -20.0, 20.0, float(inputs.gravity), step=0.01)
inputs.time_step = st.number_input("time step", 0.0001, 0.1, 0.005, step=0.0005, format="%.4f")

session = st.session_state.setdefault("session", Session(live_stiffness=True))
st.session_state.setdefault("result", None)

col_step, col_run, col_reset = st.columns(3)
n_run = st.number_input("steps per run", 1, 10000, 200)

if col_reset.button("Reset"):
    inputs.reset = True
    session.trigger(inputs)
    st.session_state["result"] = None
    inputs.reset = False

triggers = 0
if col_step.button("Step"):
    triggers = 1
if col_run.button("Run"):
    triggers = int(n_run)

if triggers:
    progress = st.empty()
    for _ in range(triggers):
        result = session.trigger(inputs)
        if result is None:
            break
        st.session_state["result"] = result
    if session.network is not None:
        progress.text(f"iteration {session.iterations}: RMS={velocity_rms(session.network):.2e}")

for msg in session.messages:
    if msg.level is MessageLevel.ERROR:
        st.error(msg.text)
    elif msg.level is MessageLevel.WARNING:
        st.warning(msg.text)
    else:
        st.caption(msg.text)

result = st.session_state["result"]
if result is None:
    st.info("Press Step or Run to start relaxing.")
    st.stop()

st.metric("Iterations", result.iterations)

X = result.positions
tens_x, tens_y, tens_z = [], [], []
comp_x, comp_y, comp_z = [], [], []
for line, t in zip(result.bars, result.tensions):
    xs = [line.start[0], line.end[0], None]
    ys = [line.start[1], line.end[1], None]
    zs = [line.start[2], line.end[2], None]
    if t >= 0.0:
        tens_x.extend(xs)
        tens_y.extend(ys)
        tens_z.extend(zs)
    else:
        comp_x.extend(xs)
        comp_y.extend(ys)
        comp_z.extend(zs)

fig = go.Figure()
fig.add_trace(
    go.Scatter3d(
        x=tens_x,
        y=tens_y,
        z=tens_z,
        mode="lines",
        line=dict(color="blue"),
        name="Tension",
    )
)
fig.add_trace(
    go.Scatter3d(
        x=comp_x,
        y=comp_y,
        z=comp_z,
        mode="lines",
        line=dict(color="red"),
        name="Compression",
    )
)
fig.add_trace(
    go.Scatter3d(
        x=X[:, 0],
        y=X[:, 1],
        z=X[:, 2],
        mode="markers",
        marker=dict(color="lightgray"),
        name="Nodes",
    )
)
fig.update_layout(
    scene=dict(
        xaxis_title="X",
        yaxis_title="Y",
        zaxis_title="Z",
        aspectmode="data",
    ),
    showlegend=True,
)
st.plotly_chart(fig, use_container_width=True)

df = to_bar_dataframe(session.network)
st.dataframe(df)
csv = df.to_csv(index=False).encode("utf-8")
st.download_button("Download bar CSV", csv, "bars.csv", "text/csv")

st.dataframe(to_node_dataframe(session.network))

js_str = json.dumps(to_structure_json(session.network))
st.download_button("Save relaxed JSON", js_str, "structure.json", "application/json")
st.download_button("Save inputs JSON", inputs_to_json(inputs), "inputs.json", "application/json")

masses = np.asarray(result.masses)
st.caption(f"total mass {masses.sum():.3f}, max valency {max(result.valencies)}")
