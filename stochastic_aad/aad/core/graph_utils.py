"""
Tape inspection helpers
Print and analyse the structure of a recorded tape
"""

import numpy as np
import pandas as pd
from typing import Dict, List
from collections import Counter


def _fan_outs(tape) -> List[int]:
    fan_outs = [0] * len(tape.nodes)
    for node in tape.nodes:
        for a in node.argument_ids:
            fan_outs[a] += 1
    return fan_outs


def get_graph_stats(tape) -> Dict:
    """
    Tape statistics (no printing)

    Returns:
        dict with node/edge counts, fan-in, fan-out and operation breakdown
    """
    if not tape.nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'constants': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    n_nodes = len(tape.nodes)
    fan_ins = [len(node.argument_ids) for node in tape.nodes]
    fan_outs = _fan_outs(tape)

    op_counter = Counter(node.tag for node in tape.nodes)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': sum(1 for node in tape.nodes if node.is_leaf),
        'constants': sum(1 for node in tape.nodes if node.is_constant),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(tape, detailed: bool = False) -> Dict:
    """
    Print a summary of the tape

    Args:
        tape: Tape to inspect
        detailed: also list the nodes (only for tapes of at most 100 nodes)

    Returns:
        the statistics dict of get_graph_stats
    """
    if not tape.nodes:
        print("Empty computation graph")
        return {}

    stats = get_graph_stats(tape)
    n_nodes = stats['nodes']

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {n_nodes:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,} ({stats['constants']:,} constant)")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / n_nodes
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and n_nodes <= 100:
        print()
        print("="*70)
        print("DETAILED NODE LIST")
        print("="*70)
        for node in tape.nodes:
            arg_info = ", ".join(f"Node{a}" for a in node.argument_ids)
            print(f"Node {node.id:3d}: {node.tag:12s} <- [{arg_info}]")

    print("="*70 + "\n")

    return stats


def print_computation_graph(tape, max_nodes: int = 20) -> None:
    """
    Print the tape node by node

    Stochastic values are shown by their mean over paths.

    Args:
        tape: Tape to inspect
        max_nodes: maximum number of nodes to print
    """
    print("\n" + "="*70)
    print("COMPUTATION GRAPH STRUCTURE")
    print("="*70)

    if not tape.nodes:
        print("Empty graph")
        return

    n_show = min(len(tape.nodes), max_nodes)

    for node in tape.nodes[:n_show]:
        out_val = float(np.mean(node.value))
        if node.argument_ids:
            arg_info = ", ".join(f"Node{a}" for a in node.argument_ids)
            print(f"Node {node.id:4d}: {node.tag:12s} ({out_val:10.6f}) <- [{arg_info}]")
        else:
            print(f"Node {node.id:4d}: {node.tag:12s} ({out_val:10.6f}) [leaf/input]")

    if len(tape.nodes) > max_nodes:
        print(f"... ({len(tape.nodes) - max_nodes} more nodes)")

    print("="*70 + "\n")


def analyze_graph_complexity(tape) -> str:
    """
    Text report on the size of the tape

    Returns:
        the report
    """
    stats = get_graph_stats(tape)

    if stats['nodes'] == 0:
        return "Empty computation graph"

    report = []
    report.append("Graph Complexity Analysis:")
    report.append(f"  Total operations: {stats['nodes']:,}")
    report.append(f"  Total connections: {stats['edges']:,}")
    report.append(f"  Average branching: {stats['avg_fan_out']:.2f}")

    if stats['nodes'] < 1000:
        complexity = "Low"
    elif stats['nodes'] < 10000:
        complexity = "Medium"
    else:
        complexity = "High"

    report.append(f"  Complexity level: {complexity}")

    if stats['operations']:
        top_ops = sorted(stats['operations'].items(), key=lambda x: x[1], reverse=True)[:3]
        report.append("  Top operations:")
        for op, count in top_ops:
            pct = 100.0 * count / stats['nodes']
            report.append(f"    - {op}: {pct:.1f}%")

    return "\n".join(report)


def graph_frame(tape) -> pd.DataFrame:
    """
    One row per node: id, operator, arguments, is_constant, size, mean.
    """
    rows = [
        {
            'id': node.id,
            'operator': node.tag,
            'arguments': node.argument_ids,
            'is_constant': node.is_constant,
            'size': int(np.size(node.value)),
            'mean': float(np.mean(node.value)),
        }
        for node in tape.nodes
    ]
    columns = ['id', 'operator', 'arguments', 'is_constant', 'size', 'mean']
    return pd.DataFrame(rows, columns=columns).set_index('id')
