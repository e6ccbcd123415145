"""Flow invocation graph definition."""
from langgraph.graph import END, START, StateGraph

from .nodes import (
    call_model,
    render_prompt,
    route_input,
    route_reply,
    run_tools,
    synthesize_speech,
    validate_input,
    validate_output,
)
from .state import FlowState


def create_flow_graph():
    """Create the flow invocation graph.

    Flow:
    1. Validate the input against the flow's input schema
    2. Prompt flows: render, call the model, run requested tools and call
       the model again until it answers without tool calls
    3. Speech flows: synthesize audio
    4. Validate the output and end

    Any node may raise a ``FlowError``; that ends the run.

    Returns:
        Compiled flow graph
    """
    workflow = StateGraph(FlowState)

    # Add nodes
    workflow.add_node("validate_input", validate_input)
    workflow.add_node("render_prompt", render_prompt)
    workflow.add_node("call_model", call_model)
    workflow.add_node("run_tools", run_tools)
    workflow.add_node("synthesize_speech", synthesize_speech)
    workflow.add_node("validate_output", validate_output)

    workflow.add_edge(START, "validate_input")
    workflow.add_conditional_edges(
        "validate_input",
        route_input,
        {
            "prompt": "render_prompt",
            "speech": "synthesize_speech",
        },
    )
    workflow.add_edge("render_prompt", "call_model")
    workflow.add_conditional_edges(
        "call_model",
        route_reply,
        {
            "tools": "run_tools",
            "output": "validate_output",
        },
    )
    workflow.add_edge("run_tools", "call_model")
    workflow.add_edge("synthesize_speech", "validate_output")
    workflow.add_edge("validate_output", END)

    return workflow.compile()


# Export the compiled graph
flow_graph = create_flow_graph()
